from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OrderItem(_CamelModel):
    name: str = Field(..., min_length=1, description="Product name")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    size: str = Field("", description="Selected size/variant")
    price: Optional[float] = Field(None, ge=0)


class Address(_CamelModel):
    first_name: str
    last_name: str
    email: Optional[str] = None
    street: str
    city: str
    state: str
    country: str
    zipcode: str
    phone: str


class OrderCreate(_CamelModel):
    """Checkout payload (cash on delivery)."""

    items: List[OrderItem]
    amount: float = Field(..., ge=0)
    address: Address


class OrderStatusUpdate(_CamelModel):
    order_id: str = ""
    status: str = ""


class OrderResponse(_CamelModel):
    id: str
    user_id: str
    items: List[OrderItem]
    address: Address
    amount: float
    payment_method: str
    payment: bool
    date: datetime
    status: str


class Ack(_CamelModel):
    success: bool
    message: Optional[str] = None


class OrderPlacedResponse(Ack):
    order_id: Optional[str] = None


class OrderListResponse(Ack):
    orders: Optional[List[OrderResponse]] = None
