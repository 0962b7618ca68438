"""
API Services
Business logic behind the route handlers.
"""

from .auth_service import AuthorizationGate, CredentialVerifier, extract_token
from .catalog_service import CatalogService, ProductPage
from .image_service import ImageLifecycle, ImageStorage
from .order_service import OrderService
from .pagination import PageWindow, resolve_window
from .review_service import ReviewService, aggregate_ratings

__all__ = [
    "AuthorizationGate",
    "CredentialVerifier",
    "extract_token",
    "CatalogService",
    "ProductPage",
    "ImageLifecycle",
    "ImageStorage",
    "OrderService",
    "PageWindow",
    "resolve_window",
    "ReviewService",
    "aggregate_ratings",
]
