"""
Service Request Service

Records assistance calls raised from a table. Requests are write-only
from the API's point of view.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.exceptions import ServerError
from tableside.models import ServiceRequest

logger = logging.getLogger(__name__)


class ServiceRequestService:
    """Writes table assistance requests to the `requests` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_service_request(
        self,
        table_number: Optional[str],
        notes: Optional[str],
    ) -> ServiceRequest:
        """
        Insert whatever the table sent; no field is required.

        Raises:
            ServerError: On any store failure, constraint violations included
        """
        request = ServiceRequest(table_number=table_number, notes=notes)
        self.db.add(request)

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error saving request: {e} | table_number={table_number!r} notes={notes!r}")
            raise ServerError() from e

        logger.info(f"Service request saved for table {table_number}")
        return request
