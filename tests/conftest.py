"""
Pytest configuration and shared fixtures
"""

import io
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from storefront.api.config import APISettings
from storefront.api.schemas.auth import UserIdentity
from storefront.api.security import create_access_token, hash_password
from storefront.db.models import Base, Product, User
from storefront.db.session import build_session_factory

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

TEST_SECRET = "test-secret-key-for-signing-tokens-0123456789"


@dataclass
class FakeUpload:
    """Stand-in for an uploaded file (same attributes FastAPI's UploadFile exposes)."""

    filename: Optional[str]
    content_type: Optional[str]
    file: BinaryIO


@pytest.fixture
def engine():
    """In-memory SQLite database shared by every session in a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def settings(upload_dir):
    return APISettings(
        JWT_SECRET=TEST_SECRET,
        UPLOAD_DIR=str(upload_dir),
        PAGINATION_MAX_LIMIT=5,
        MAX_UPLOAD_BYTES=1024,
    )


@pytest.fixture
def make_upload():
    """Build an upload from raw bytes."""

    def _make(data: bytes = PNG_BYTES, filename: str = "photo.png", content_type: str = "image/png"):
        return FakeUpload(filename=filename, content_type=content_type, file=io.BytesIO(data))

    return _make


@pytest.fixture
def make_user(db):
    def _make(name: str = "Jane Doe", email: Optional[str] = None, is_admin: bool = False) -> User:
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            password_hash=hash_password("Secret123"),
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user(name="Admin User", is_admin=True)


@pytest.fixture
def customer(make_user):
    return make_user(name="Jane Doe")


@pytest.fixture
def identity():
    """Convert a User row to the identity the services expect."""

    def _identity(user: User) -> UserIdentity:
        return UserIdentity.model_validate(user)

    return _identity


@pytest.fixture
def make_product(db, upload_dir):
    """Insert a product whose image file exists on disk."""
    counter = {"n": 0}

    def _make(name: Optional[str] = None, price: float = 10.0, rating: float = 0.0, **fields) -> Product:
        counter["n"] += 1
        image = upload_dir / f"seed-{counter['n']}.png"
        image.write_bytes(PNG_BYTES)

        product = Product(
            name=name or f"Product {counter['n']}",
            description=fields.pop("description", "A product"),
            brand=fields.pop("brand", "Acme"),
            category=fields.pop("category", "Gadgets"),
            price=price,
            count_in_stock=fields.pop("count_in_stock", 7),
            image=image.as_posix(),
            rating=rating,
            num_reviews=0,
            **fields,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def token_for():
    def _token(user: User, **kwargs) -> str:
        return create_access_token({"sub": str(user.id)}, secret=TEST_SECRET, **kwargs)

    return _token
