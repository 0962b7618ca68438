"""
Order Service
Checkout, order lookups and the paid/delivered status writes.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...db.models import Order, OrderItem, Product
from ..errors import InvalidRequestError, ResourceNotFoundError
from ..schemas.auth import UserIdentity
from ..schemas.order import OrderCreate, PaymentResult

logger = logging.getLogger(__name__)


def _round(amount: float) -> float:
    return round(amount, 2)


class OrderService:
    """
    Order operations.

    Args:
        tax_rate: Fraction of the items price charged as tax
        shipping_price: Flat shipping fee
        free_shipping_threshold: Items price above which shipping is free
    """

    def __init__(self, tax_rate: float, shipping_price: float, free_shipping_threshold: float):
        self.tax_rate = tax_rate
        self.shipping_price = shipping_price
        self.free_shipping_threshold = free_shipping_threshold

    def create_order(self, db: Session, customer: UserIdentity, request: OrderCreate) -> Order:
        """
        Place an order.

        Each line captures the product's name, price and image as they are
        now; later catalog changes do not touch existing orders.
        """
        if not request.order_items:
            raise InvalidRequestError("Cart items are required")

        order = Order(
            user_id=customer.id,
            shipping_address=request.shipping_address.model_dump(),
            payment_method=request.payment_method,
        )

        items_price = 0.0
        for position, line in enumerate(request.order_items):
            product = db.get(Product, line.product_id)
            if product is None:
                raise ResourceNotFoundError("Product", line.product_id)

            order.items.append(
                OrderItem(
                    product_id=product.id,
                    position=position,
                    name=product.name,
                    quantity=line.quantity,
                    price=product.price,
                    image=product.image,
                )
            )
            items_price += product.price * line.quantity

        shipping = 0.0 if items_price > self.free_shipping_threshold else self.shipping_price
        tax = items_price * self.tax_rate

        order.items_price = _round(items_price)
        order.shipping_price = _round(shipping)
        order.tax_price = _round(tax)
        order.total_price = _round(order.items_price + order.shipping_price + order.tax_price)

        db.add(order)
        db.commit()
        db.refresh(order)

        logger.info(
            f"Order created: id={order.id}, user={customer.id}, "
            f"items={len(order.items)}, total={order.total_price}"
        )
        return order

    def list_orders(self, db: Session) -> List[Order]:
        return list(db.scalars(select(Order).order_by(Order.created_at.desc())).all())

    def list_user_orders(self, db: Session, user_id: UUID) -> List[Order]:
        query = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc())
        return list(db.scalars(query).all())

    def get_order(self, db: Session, order_id: UUID, viewer: Optional[UserIdentity] = None) -> Order:
        """
        Fetch an order.

        When ``viewer`` is given, orders belonging to someone else are
        reported as missing unless the viewer is an admin.
        """
        order = db.get(Order, order_id)
        if order is None:
            raise ResourceNotFoundError("Order", order_id)
        if viewer is not None and not viewer.is_admin and order.user_id != viewer.id:
            raise ResourceNotFoundError("Order", order_id)
        return order

    def mark_paid(
        self,
        db: Session,
        order_id: UUID,
        payer: UserIdentity,
        payment_result: Optional[PaymentResult] = None,
    ) -> Order:
        order = self.get_order(db, order_id, viewer=payer)

        order.is_paid = True
        order.paid_at = datetime.now(timezone.utc)
        if payment_result is not None:
            order.payment_result = payment_result.model_dump()

        db.commit()
        db.refresh(order)

        logger.info(f"Order paid: id={order.id}, by={payer.id}")
        return order

    def mark_delivered(self, db: Session, order_id: UUID) -> Order:
        order = self.get_order(db, order_id)

        order.is_delivered = True
        order.delivered_at = datetime.now(timezone.utc)

        db.commit()
        db.refresh(order)

        logger.info(f"Order delivered: id={order.id}")
        return order

    def delete_order(self, db: Session, order_id: UUID) -> None:
        order = self.get_order(db, order_id)
        db.delete(order)
        db.commit()
        logger.info(f"Order deleted: id={order_id}")
