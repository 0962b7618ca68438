"""
Dependencies
Per-request database sessions, service construction from settings, and the
authentication chain (get_current_user -> require_admin).
"""

import logging
from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from ..db.session import build_engine, build_session_factory
from .config import APISettings, get_settings
from .schemas.auth import UserIdentity
from .services.auth_service import AuthorizationGate, CredentialVerifier, extract_token
from .services.catalog_service import CatalogService
from .services.image_service import ImageLifecycle, ImageStorage
from .services.order_service import OrderService
from .services.review_service import ReviewService

logger = logging.getLogger(__name__)

# Database engine and session factory
_engine = None
_SessionLocal = None


def get_db_engine():
    """Get database engine (singleton)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
        logger.info(f"Database engine created: {settings.database_url.split('@')[-1]}")
    return _engine


def get_session_factory():
    """Get database session factory (singleton)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = build_session_factory(get_db_engine())
        logger.info("Database session factory created")
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """One session per request, closed when the response is done."""
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_image_storage(settings: APISettings = Depends(get_settings)) -> ImageStorage:
    return ImageStorage(
        root=settings.upload_dir,
        allowed_types=settings.allowed_image_types,
        max_bytes=settings.max_upload_bytes,
    )


def get_catalog_service(
    settings: APISettings = Depends(get_settings),
    storage: ImageStorage = Depends(get_image_storage),
) -> CatalogService:
    return CatalogService(
        max_limit=settings.pagination_max_limit,
        images=ImageLifecycle(storage),
    )


def get_review_service() -> ReviewService:
    return ReviewService()


def get_order_service(settings: APISettings = Depends(get_settings)) -> OrderService:
    return OrderService(
        tax_rate=settings.tax_rate,
        shipping_price=settings.shipping_price,
        free_shipping_threshold=settings.free_shipping_threshold,
    )


def get_credential_verifier(settings: APISettings = Depends(get_settings)) -> CredentialVerifier:
    return CredentialVerifier(secret=settings.jwt_secret, algorithm=settings.jwt_algorithm)


def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: APISettings = Depends(get_settings),
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    db: Session = Depends(get_db),
) -> UserIdentity:
    """
    Resolve the caller from the bearer header, falling back to the auth
    cookie. Routes that need a signed-in user depend on this.

    Raises:
        AuthenticationError: 401, the error handler also clears the cookie
    """
    token = extract_token(authorization, request.cookies.get(settings.auth_cookie_name))
    return verifier.verify(token, db)


def require_admin(current_user: UserIdentity = Depends(get_current_user)) -> UserIdentity:
    """
    Resolve the caller and require admin privileges.

    Raises:
        NotAdminError: 401 when the user is not an admin
    """
    return AuthorizationGate().require_admin(current_user)
