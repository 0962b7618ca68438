"""
Database ORM Models
SQLAlchemy ORM models for database tables.
"""

from .models import Base, User, Product, Review, Order, OrderItem

__all__ = [
    "Base",
    "User",
    "Product",
    "Review",
    "Order",
    "OrderItem",
]
