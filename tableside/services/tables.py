"""
Table Resolver

Looks up a restaurant table from the token printed in its QR code or,
failing that, from its table number.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.exceptions import BadRequestError, NotFoundError, translate_db_error
from tableside.models import RestaurantTable

logger = logging.getLogger(__name__)


class TableResolver:
    """Read access to the `tables` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_table(
        self,
        qr_code_image: Optional[str] = None,
        table_number: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Find a table by QR token, or by number when no token is given.

        Args:
            qr_code_image: Token encoded in the table's QR code
            table_number: Number painted on the table

        Returns:
            dict: Every stored column of the matching table

        Raises:
            BadRequestError: If neither identifier is supplied
            NotFoundError: If no table matches
            ServerError: If the query fails
        """
        if qr_code_image:
            query = select(RestaurantTable).where(RestaurantTable.qr_code_image == qr_code_image)
        elif table_number:
            query = select(RestaurantTable).where(RestaurantTable.table_number == table_number)
        else:
            raise BadRequestError("Bad request")

        try:
            result = await self.db.execute(query)
            table = result.scalars().first()
        except SQLAlchemyError as e:
            raise translate_db_error(
                e,
                "fetching table info",
                qr_code_image=qr_code_image,
                table_number=table_number,
            ) from e

        if table is None:
            logger.info(f"No table for qr_code_image={qr_code_image!r} table_number={table_number!r}")
            raise NotFoundError("Table not found")

        return table.to_dict()
