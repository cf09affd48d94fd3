"""
Pydantic Schemas for Request/Response Validation

Request bodies use the camelCase keys sent by the table-side web client
(`tableNumber`, `orderItems`, ...); snake_case names are accepted too.
"""

import json
from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _number_to_str(v: Any) -> Any:
    """Table numbers arrive as either JSON numbers or strings."""
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return str(v)
    if isinstance(v, str):
        return v.strip()
    return v


def _to_text(v: Any) -> Any:
    """Store anything that is not already text as its JSON form."""
    if v is None or isinstance(v, str):
        return v
    return json.dumps(v)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderItem(BaseModel):
    """
    Single line in an order.

    The client spelling `{name, amount, price}` is accepted and stored as
    `{name, quantity, unit_price}`; keys outside these three are dropped,
    so a stored line reads back with the same values under these names.
    """
    name: str = Field(..., min_length=1, max_length=100, examples=["Pizza"])
    quantity: int = Field(
        ...,
        ge=1,
        validation_alias=AliasChoices("quantity", "amount"),
        examples=[2],
    )
    unit_price: float = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("unit_price", "unitPrice", "price"),
        examples=[10.0],
    )


class OrderCreate(BaseModel):
    """Request schema for placing an order from a table."""
    model_config = ConfigDict(populate_by_name=True)

    table_number: str = Field(..., min_length=1, max_length=20, alias="tableNumber", examples=["12"])
    order_items: List[OrderItem] = Field(..., min_length=1, alias="orderItems")
    total_amount: float = Field(..., ge=0, alias="totalAmount", examples=[20.0])
    payment_method: Optional[str] = Field(None, max_length=50, alias="paymentMethod", examples=["cash", "card"])

    @field_validator("table_number", mode="before")
    @classmethod
    def coerce_table_number(cls, v: Any) -> Any:
        return _number_to_str(v)


class OrderStatusUpdate(BaseModel):
    """Request schema for moving an order to a new status."""
    status: str = Field(..., min_length=1, max_length=50, examples=["served"])


class ServiceRequestCreate(BaseModel):
    """
    Request schema for an assistance call.

    Both fields are optional; whatever the table sends is recorded.
    """
    model_config = ConfigDict(populate_by_name=True)

    table_number: Optional[str] = Field(None, alias="tableNumber", examples=["5"])
    notes: Optional[str] = Field(None, examples=["need napkins"])

    @field_validator("table_number", mode="before")
    @classmethod
    def coerce_table_number(cls, v: Any) -> Any:
        return _to_text(_number_to_str(v))

    @field_validator("notes", mode="before")
    @classmethod
    def coerce_notes(cls, v: Any) -> Any:
        return _to_text(v)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class FoodItemResponse(BaseModel):
    """Public menu entry."""
    id: int
    name: str
    price: float
    type: str
    image: str


class OrderCreateResponse(BaseModel):
    """Response after successfully creating an order."""
    message: str
    order_id: int = Field(..., serialization_alias="orderId")


class OrderResponse(BaseModel):
    """Response schema for a single order."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    table_number: str
    items: List[OrderItem]
    total_amount: float
    total_price: float
    payment_method: Optional[str]
    order_date: datetime
    status: str

    @field_validator("items", mode="before")
    @classmethod
    def decode_items(cls, v: Any) -> Any:
        """The store keeps the item list as a JSON string."""
        if isinstance(v, str):
            return json.loads(v)
        return v


class OrderListResponse(BaseModel):
    """Response for listing multiple orders."""
    total: int
    orders: List[OrderResponse]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    timestamp: datetime
