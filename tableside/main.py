"""
FastAPI Application Entry Point

Tableside Ordering API - dine-in ordering from the table.

Endpoints:
    - GET  /api/food-items: Published menu, optionally filtered by type
    - GET  /api/table-info: Resolve a table from its QR token or number
    - POST /api/orders: Place an order from a table
    - GET  /api/orders: List orders
    - GET  /api/orders/{id}: Get one order
    - PUT  /api/orders/{id}/status: Move an order to a new status
    - POST /api/requests: Call staff to the table
    - GET  /health: System health check

Error responses are short plain-text messages; details go to the log.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

import redis
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from kombu.exceptions import OperationalError as BrokerError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.config import get_settings, setup_logging
from tableside.core.exceptions import NotFoundError, OrderingError
from tableside.database import engine, get_db, init_db
from tableside.models import Order
from tableside.schemas import (
    FoodItemResponse,
    HealthResponse,
    OrderCreate,
    OrderCreateResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    ServiceRequestCreate,
)
from tableside.services import (
    CatalogService,
    OrderService,
    ServiceRequestService,
    TableResolver,
)
from tableside.tasks import export_order_to_ledger

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    if settings.db_create_tables:
        await init_db()

    logger.info(f"Ledger export: {'enabled' if settings.ledger_export_enabled else 'disabled'}")
    logger.info("Application ready")

    yield

    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Menu, table lookup, ordering and service requests for dine-in guests.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_table_resolver(db: AsyncSession = Depends(get_db)) -> TableResolver:
    return TableResolver(db)


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_service_request_service(db: AsyncSession = Depends(get_db)) -> ServiceRequestService:
    return ServiceRequestService(db)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def order_ledger_payload(order: Order) -> dict[str, Any]:
    """Serialize an order for the ledger export task."""
    return {
        "order_id": order.id,
        "table_number": order.table_number,
        "order_date": order.order_date.isoformat() if order.order_date else None,
        "items": order.items,
        "total_amount": order.total_amount,
        "total_price": order.total_price,
        "payment_method": order.payment_method,
        "status": order.status,
    }


def queue_ledger_export(order: Order) -> None:
    """
    Hand the order to the Celery ledger export.

    The order is already committed, so an unreachable broker is logged
    and does not fail the request.
    """
    if not settings.ledger_export_enabled:
        return
    try:
        export_order_to_ledger.delay(order_ledger_payload(order))
    except BrokerError as e:
        logger.warning(f"Could not queue ledger export for order #{order.id}: {e}")


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db)
) -> HealthResponse:
    """Verify the database and the ledger broker are reachable."""

    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    redis_status = "healthy"
    try:
        r = redis.Redis.from_url(settings.redis_url, socket_timeout=2)
        r.ping()
        r.close()
    except (redis.RedisError, OSError) as e:
        redis_status = f"unhealthy: {str(e)}"
        logger.error(f"Redis health check failed: {e}")

    overall = "operational" if db_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        redis=redis_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# MENU ENDPOINTS
# =============================================================================

@app.get(
    "/api/food-items",
    response_model=list[FoodItemResponse],
    tags=["Menu"],
    summary="List Published Menu Items",
)
async def list_food_items(
    item_type: Optional[str] = Query(None, alias="type"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[FoodItemResponse]:
    """Published items ordered by id; `type=ALL` or no type returns every category."""
    return await catalog.list_food_items(item_type)


# =============================================================================
# TABLE ENDPOINTS
# =============================================================================

@app.get(
    "/api/table-info",
    tags=["Tables"],
    summary="Resolve Table",
)
async def table_info(
    qr_code_image: Optional[str] = Query(None, alias="qrCodeImage"),
    table_number: Optional[str] = Query(None, alias="tableNumber"),
    resolver: TableResolver = Depends(get_table_resolver),
) -> dict[str, Any]:
    """
    Look up a table by the token in its QR code, or by its number.

    The QR token wins when both are given.
    """
    return await resolver.resolve_table(
        qr_code_image=qr_code_image,
        table_number=table_number,
    )


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=OrderCreateResponse,
    status_code=201,
    tags=["Orders"],
    summary="Place Order",
)
async def create_order(
    order_data: OrderCreate,
    orders: OrderService = Depends(get_order_service),
) -> OrderCreateResponse:
    """Place an order from a table. New orders start in the "waiting" status."""
    logger.info(
        f"Received order: table={order_data.table_number} "
        f"items={len(order_data.order_items)} total={order_data.total_amount} "
        f"payment={order_data.payment_method}"
    )

    order = await orders.create_order(order_data)
    queue_ledger_export(order)

    return OrderCreateResponse(
        message="Order created successfully",
        order_id=order.id,
    )


@app.get(
    "/api/orders",
    response_model=OrderListResponse,
    tags=["Orders"],
    summary="List Orders",
)
async def list_orders(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None),
    table_number: Optional[str] = Query(None, alias="tableNumber"),
    orders: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    """Retrieve paginated list of orders, newest first."""
    total, page = await orders.list_orders(
        status=status,
        table_number=table_number,
        skip=skip,
        limit=limit,
    )
    return OrderListResponse(
        total=total,
        orders=[OrderResponse.model_validate(order) for order in page],
    )


@app.get(
    "/api/orders/{order_id}",
    response_model=OrderResponse,
    tags=["Orders"],
)
async def get_order(
    order_id: int,
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """Get a specific order by ID."""
    order = await orders.get_order(order_id)
    return OrderResponse.model_validate(order)


@app.put(
    "/api/orders/{order_id}/status",
    response_class=PlainTextResponse,
    tags=["Orders"],
    summary="Update Order Status",
)
async def update_order_status(
    order_id: str,
    status_update: OrderStatusUpdate,
    orders: OrderService = Depends(get_order_service),
) -> PlainTextResponse:
    """Set an order's status to any non-empty value. An id that is not a number matches no order."""
    try:
        order_pk = int(order_id)
    except ValueError:
        raise NotFoundError("Order not found") from None

    await orders.update_order_status(order_pk, status_update.status)
    return PlainTextResponse("Order status updated successfully", status_code=200)


# =============================================================================
# SERVICE REQUEST ENDPOINTS
# =============================================================================

@app.post(
    "/api/requests",
    response_class=PlainTextResponse,
    status_code=201,
    tags=["Service Requests"],
    summary="Call Staff",
)
async def create_service_request(
    request_data: Optional[ServiceRequestCreate] = None,
    service: ServiceRequestService = Depends(get_service_request_service),
) -> PlainTextResponse:
    """Record an assistance request from a table. Both fields are optional."""
    payload = request_data or ServiceRequestCreate()
    logger.info(f"Received service request: table={payload.table_number} notes={payload.notes!r}")

    await service.create_service_request(payload.table_number, payload.notes)
    return PlainTextResponse("Request saved successfully", status_code=201)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(OrderingError)
async def ordering_error_handler(request: Request, exc: OrderingError) -> PlainTextResponse:
    """Map taxonomy errors to their status code and short message."""
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    """Malformed input is a 400, rejected before any store access."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc.errors()}")

    if request.url.path.startswith("/api/orders") and request.method == "POST":
        message = "Invalid order data"
    else:
        message = "Bad request"
    return PlainTextResponse(message, status_code=400)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    detail = f"Server error: {exc}" if settings.debug else "Server error"
    return PlainTextResponse(detail, status_code=500)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tableside.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )
