"""
Catalog Service

Lists the published menu, optionally narrowed to one category.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.config import get_settings
from tableside.core.exceptions import translate_db_error
from tableside.models import FoodItem
from tableside.schemas import FoodItemResponse

logger = logging.getLogger(__name__)


class CatalogService:
    """Read access to the `food_items` table."""

    def __init__(self, db: AsyncSession, all_types_sentinel: Optional[str] = None):
        self.db = db
        self.all_types_sentinel = all_types_sentinel or get_settings().all_types_sentinel

    async def list_food_items(self, item_type: Optional[str] = None) -> list[FoodItemResponse]:
        """
        Return published menu items ordered by id.

        Args:
            item_type: Category to filter on. None, "" and the "ALL"
                sentinel all mean no category filter.

        Returns:
            Normalized menu items (empty list when nothing matches)

        Raises:
            ServerError: If the query fails
        """
        query = select(FoodItem).where(FoodItem.published_at.is_not(None))

        if item_type and item_type != self.all_types_sentinel:
            query = query.where(FoodItem.type == item_type)

        query = query.order_by(FoodItem.id.asc())
        logger.debug(f"Listing food items (type={item_type!r})")

        try:
            result = await self.db.execute(query)
            items = result.scalars().all()
        except SQLAlchemyError as e:
            raise translate_db_error(e, "fetching food items", item_type=item_type) from e

        return [self._to_response(item) for item in items]

    def _to_response(self, item: FoodItem) -> FoodItemResponse:
        return FoodItemResponse(
            id=item.id,
            name=item.name,
            price=float(item.price or 0),
            type=item.type or self.all_types_sentinel,
            image=item.image or "",
        )
