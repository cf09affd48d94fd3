"""
                        Services Module

One service per handler, each built around an injected AsyncSession:
    - catalog: published menu listing
    - tables: QR token / table number lookup
    - orders: order creation and status updates
    - service_requests: assistance calls from a table
    - excel_manager: lock-protected Excel ledger of orders
"""

from tableside.services.catalog import CatalogService
from tableside.services.excel_manager import ExcelManager
from tableside.services.orders import OrderService
from tableside.services.service_requests import ServiceRequestService
from tableside.services.tables import TableResolver

__all__ = [
    "CatalogService",
    "ExcelManager",
    "OrderService",
    "ServiceRequestService",
    "TableResolver",
]
