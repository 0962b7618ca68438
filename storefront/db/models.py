"""
SQLAlchemy ORM Models
Database table definitions using SQLAlchemy ORM.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, Numeric,
    String, Text, UniqueConstraint, Uuid
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    User model.

    Owned by the identity service; this API only reads it to resolve tokens.
    """
    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False,
                          comment='Bcrypt hashed password')
    is_admin = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class Product(Base):
    """
    Product model.

    ``rating`` and ``num_reviews`` are derived from ``reviews`` and are
    recomputed in full whenever a review is added.
    """
    __tablename__ = 'products'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id'), nullable=True, index=True,
                    comment='Admin who created the product')

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    brand = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    count_in_stock = Column(Integer, nullable=False, default=0)
    image = Column(String(1024), nullable=False,
                   comment='Path of the stored image file')

    rating = Column(Float, nullable=False, default=0.0)
    num_reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False)

    reviews = relationship(
        "Review",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Review.created_at",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name})>"


class Review(Base):
    """
    Product review.

    ``name`` is a snapshot of the reviewer's name at creation time.
    """
    __tablename__ = 'reviews'
    __table_args__ = (
        UniqueConstraint('product_id', 'user_id', name='uq_reviews_product_user'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey('products.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Uuid, ForeignKey('users.id'), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    product = relationship("Product", back_populates="reviews")

    def __repr__(self):
        return f"<Review(product_id={self.product_id}, user_id={self.user_id}, rating={self.rating})>"


class Order(Base):
    """
    Customer order.

    Immutable after creation except for the paid/delivered status fields.
    """
    __tablename__ = 'orders'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id'), nullable=False, index=True)

    shipping_address = Column(JSON, nullable=False,
                             comment='{address, city, postal_code, country}')
    payment_method = Column(String(100), nullable=False)
    payment_result = Column(JSON, nullable=True,
                           comment='Payment provider response recorded when paid')

    items_price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    tax_price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    shipping_price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    total_price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)

    is_paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    is_delivered = Column(Boolean, nullable=False, default=False)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    def __repr__(self):
        return f"<Order(id={self.id}, user_id={self.user_id}, total={self.total_price})>"


class OrderItem(Base):
    """Order line item with product details captured at checkout."""
    __tablename__ = 'order_items'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey('products.id', ondelete='SET NULL'), nullable=True)
    position = Column(Integer, nullable=False, default=0)

    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    image = Column(String(1024), nullable=False)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem(name={self.name}, quantity={self.quantity})>"
