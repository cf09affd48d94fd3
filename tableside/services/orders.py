"""
Order Service

Owns the order lifecycle: placing an order from a table and moving it
through client-supplied statuses.

Lifecycle:
    created (status = "waiting") -> updated (status = any non-empty value)

There is no fixed status vocabulary and no terminal state; the kitchen or
floor client decides what comes next. The item list is written once at
creation and never touched again.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.config import get_settings
from tableside.core.exceptions import NotFoundError, translate_db_error
from tableside.models import Order
from tableside.schemas import OrderCreate

logger = logging.getLogger(__name__)


class OrderService:
    """Read/write access to the `orders` table."""

    def __init__(self, db: AsyncSession, initial_status: Optional[str] = None):
        self.db = db
        self.initial_status = initial_status or get_settings().default_order_status

    async def create_order(self, order_data: OrderCreate) -> Order:
        """
        Persist a new order.

        The request shape has already been validated; this only builds
        and executes the insert.

        Args:
            order_data: Validated order request

        Returns:
            Order: The stored order, with its assigned id

        Raises:
            ConflictError: If the store rejects the row (unknown table, duplicate key)
            ServerError: For any other store failure
        """
        items_json = json.dumps([item.model_dump() for item in order_data.order_items])

        new_order = Order(
            table_number=order_data.table_number,
            items=items_json,
            total_amount=order_data.total_amount,
            payment_method=order_data.payment_method,
            order_date=datetime.now(timezone.utc),
            status=self.initial_status,
            total_price=order_data.total_amount,
        )

        self.db.add(new_order)
        try:
            await self.db.commit()
            await self.db.refresh(new_order)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise translate_db_error(
                e,
                "saving order",
                conflict_message="Order conflicts with existing data",
                table_number=order_data.table_number,
                items=items_json,
                total_amount=order_data.total_amount,
                payment_method=order_data.payment_method,
            ) from e

        logger.info(f"Order #{new_order.id} created for table {new_order.table_number}")
        return new_order

    async def update_order_status(self, order_id: int, status: str) -> None:
        """
        Overwrite an order's status. No other column changes.

        Raises:
            NotFoundError: If no order has this id
            ServerError: If the update fails
        """
        stmt = update(Order).where(Order.id == order_id).values(status=status)

        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise translate_db_error(
                e, "updating order status", order_id=order_id, status=status
            ) from e

        if result.rowcount == 0:
            logger.info(f"Status update for unknown order #{order_id}")
            raise NotFoundError("Order not found")

        logger.info(f"Order #{order_id} status -> {status}")

    async def get_order(self, order_id: int) -> Order:
        """Fetch one order by id, raising NotFoundError if absent."""
        try:
            result = await self.db.execute(select(Order).where(Order.id == order_id))
            order = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise translate_db_error(e, "fetching order", order_id=order_id) from e

        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")
        return order

    async def list_orders(
        self,
        status: Optional[str] = None,
        table_number: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[int, list[Order]]:
        """
        Page through orders, newest first.

        Returns:
            (total matching orders, orders in this page)
        """
        query = select(Order).order_by(Order.order_date.desc(), Order.id.desc())
        count_query = select(func.count(Order.id))

        if status:
            query = query.where(Order.status == status)
            count_query = count_query.where(Order.status == status)
        if table_number:
            query = query.where(Order.table_number == table_number)
            count_query = count_query.where(Order.table_number == table_number)

        try:
            total_result = await self.db.execute(count_query)
            total = total_result.scalar() or 0

            result = await self.db.execute(query.offset(skip).limit(limit))
            orders = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise translate_db_error(
                e, "listing orders", status=status, table_number=table_number
            ) from e

        return total, orders
