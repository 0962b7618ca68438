"""
Order request/response schemas.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from .common import CamelModel


class ShippingAddress(CamelModel):
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class OrderItemRequest(CamelModel):
    """A cart line: which product and how many."""

    product_id: UUID
    quantity: int = Field(..., ge=1, le=1000)


class OrderCreate(CamelModel):
    """Request schema for checkout."""

    order_items: List[OrderItemRequest] = Field(..., description="Cart items")
    shipping_address: ShippingAddress
    payment_method: str = Field(..., min_length=1, max_length=100)


class PaymentResult(CamelModel):
    """Payment provider confirmation recorded when an order is paid."""

    id: Optional[str] = None
    status: Optional[str] = None
    update_time: Optional[str] = None
    email_address: Optional[str] = None


class OrderItemResponse(CamelModel):
    product_id: Optional[UUID] = None
    name: str
    quantity: int
    price: float
    image: str


class OrderResponse(CamelModel):
    id: UUID
    user_id: UUID
    order_items: List[OrderItemResponse] = Field(..., validation_alias="items")
    shipping_address: ShippingAddress
    payment_method: str
    payment_result: Optional[PaymentResult] = None
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    is_paid: bool
    paid_at: Optional[datetime] = None
    is_delivered: bool
    delivered_at: Optional[datetime] = None
    created_at: datetime
