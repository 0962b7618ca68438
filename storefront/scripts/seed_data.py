#!/usr/bin/env python3
"""
Seed Script
Creates the tables, an admin user and (optionally) a sample product, then
prints a bearer token for the admin.

Usage:
    python -m storefront.scripts.seed_data --email admin@example.com --password secret
    python -m storefront.scripts.seed_data --email admin@example.com --password secret \
        --product-image ./sample.jpg
"""

import argparse
import logging
import sys
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.api.config import get_settings
from storefront.api.security import create_access_token, hash_password
from storefront.api.services.image_service import ImageStorage
from storefront.db.models import Base, Product, User
from storefront.db.session import build_engine, build_session_factory

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def ensure_admin(db: Session, email: str, password: str, name: str = "Admin") -> User:
    """
    Return the admin account for ``email``, creating it if missing.

    Raises:
        ValueError: the email belongs to an existing non-admin account,
            which is never promoted silently
    """
    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            is_admin=True,
        )
        db.add(user)
        db.commit()
        logger.info(f"Created admin user {user.email} ({user.id})")
        return user

    if not user.is_admin:
        raise ValueError(f"User {email} exists but is not an admin")

    logger.info(f"Admin user already exists: {user.email} ({user.id})")
    return user


def main():
    """Create an admin (idempotent) and print a token for it."""
    parser = argparse.ArgumentParser(description="Seed the storefront database")
    parser.add_argument("--email", type=str, required=True, help="Admin email")
    parser.add_argument("--password", type=str, required=True, help="Admin password")
    parser.add_argument("--name", type=str, default="Admin", help="Admin display name (default: Admin)")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: DATABASE_URL from the environment)",
    )
    parser.add_argument(
        "--product-image",
        type=str,
        default=None,
        help="Image file for a sample product; no product is created without it",
    )

    args = parser.parse_args()

    settings = get_settings()
    db_url = args.database_url or settings.database_url

    engine = build_engine(db_url)
    Base.metadata.create_all(bind=engine)
    SessionLocal = build_session_factory(engine)

    try:
        with SessionLocal() as db:
            admin = ensure_admin(db, args.email, args.password, args.name)

            if args.product_image:
                image_path = Path(args.product_image)
                if not image_path.exists():
                    logger.error(f"Image file not found: {image_path}")
                    sys.exit(1)

                storage = ImageStorage(settings.upload_dir)
                product = Product(
                    user_id=admin.id,
                    name="Sample Product",
                    description="Seeded sample product",
                    brand="Storefront",
                    category="Samples",
                    price=9.99,
                    count_in_stock=10,
                    image=storage.copy_from(image_path),
                )
                db.add(product)
                db.commit()
                logger.info(f"Created sample product {product.id}")

            token = create_access_token({"sub": str(admin.id)})

    except Exception as e:
        logger.error(f"Seeding failed: {e}", exc_info=True)
        sys.exit(1)
    finally:
        engine.dispose()

    print(token)


if __name__ == "__main__":
    main()
