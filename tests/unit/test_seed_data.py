"""
Tests for the admin seeding helper.
"""

import bcrypt
import pytest
from sqlalchemy import func, select

from storefront.db.models import User
from storefront.scripts.seed_data import ensure_admin


def test_creates_admin_with_hashed_password(db):
    admin = ensure_admin(db, "root@example.com", "Secret123", name="Root")

    assert admin.is_admin is True
    assert admin.name == "Root"
    assert admin.password_hash != "Secret123"
    assert bcrypt.checkpw(b"Secret123", admin.password_hash.encode("utf-8"))


def test_existing_admin_is_reused(db):
    first = ensure_admin(db, "root@example.com", "Secret123")
    second = ensure_admin(db, "root@example.com", "Other456")

    assert second.id == first.id
    assert db.scalar(select(func.count()).select_from(User)) == 1


def test_existing_customer_is_not_promoted(db, make_user):
    customer = make_user(name="Jane Doe", email="jane@example.com")

    with pytest.raises(ValueError, match="not an admin"):
        ensure_admin(db, "jane@example.com", "Secret123")

    db.refresh(customer)
    assert customer.is_admin is False
