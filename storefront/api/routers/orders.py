"""
Order Endpoints
POST   /orders              - Place an order (authenticated)
GET    /orders              - All orders (admin)
GET    /orders/my-orders    - Caller's orders (authenticated)
GET    /orders/{id}         - Single order (owner or admin)
PUT    /orders/{id}/pay     - Mark paid (owner or admin)
PUT    /orders/{id}/deliver - Mark delivered (admin)
DELETE /orders/{id}         - Delete order (admin)
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from ..dependencies import get_current_user, get_db, get_order_service, require_admin
from ..schemas.auth import UserIdentity
from ..schemas.common import AUTH_RESPONSES, NOT_FOUND_RESPONSES, MessageResponse
from ..schemas.order import OrderCreate, OrderResponse, PaymentResult
from ..services.order_service import OrderService

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND_RESPONSES, **AUTH_RESPONSES},
)
def add_order_items(
    request: OrderCreate,
    current_user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
):
    """
    Place an order.

    Prices are taken from the catalog at checkout and totals are computed
    server-side.
    """
    return orders.create_order(db, current_user, request)


@router.get("", response_model=List[OrderResponse], responses=AUTH_RESPONSES)
def get_orders(
    admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
):
    return orders.list_orders(db)


@router.get("/my-orders", response_model=List[OrderResponse], responses=AUTH_RESPONSES)
def get_my_orders(
    current_user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
):
    return orders.list_user_orders(db, current_user.id)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={**NOT_FOUND_RESPONSES, **AUTH_RESPONSES},
)
def get_order_by_id(
    order_id: UUID,
    current_user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
):
    return orders.get_order(db, order_id, viewer=current_user)


@router.put(
    "/{order_id}/pay",
    response_model=OrderResponse,
    responses={**NOT_FOUND_RESPONSES, **AUTH_RESPONSES},
)
def update_order_to_paid(
    order_id: UUID,
    payment_result: Optional[PaymentResult] = Body(None),
    current_user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
):
    return orders.mark_paid(db, order_id, payer=current_user, payment_result=payment_result)


@router.put(
    "/{order_id}/deliver",
    response_model=OrderResponse,
    responses={**NOT_FOUND_RESPONSES, **AUTH_RESPONSES},
)
def update_order_to_delivered(
    order_id: UUID,
    admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
):
    return orders.mark_delivered(db, order_id)


@router.delete(
    "/{order_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND_RESPONSES, **AUTH_RESPONSES},
)
def delete_order(
    order_id: UUID,
    admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> MessageResponse:
    orders.delete_order(db, order_id)
    return MessageResponse(message="Order deleted successfully")
