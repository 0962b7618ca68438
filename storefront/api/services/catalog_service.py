"""
Catalog Service
Product reads and admin mutations.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...db.models import Product
from ..errors import ConcurrentModificationError, ResourceNotFoundError
from ..schemas.auth import UserIdentity
from ..schemas.product import ProductCreate, ProductUpdate
from .image_service import ImageLifecycle, Scheduler, Upload
from .pagination import PageWindow, RawParam, resolve_window

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 3


@dataclass
class ProductPage:
    products: List[Product]
    total: int
    window: PageWindow


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CatalogService:
    """
    Product catalog operations.

    Args:
        max_limit: Page size ceiling for listings
        images: Image lifecycle used by create/update/delete
    """

    def __init__(self, max_limit: int, images: Optional[ImageLifecycle] = None):
        self.max_limit = max_limit
        self.images = images

    # Reads

    def list_products(
        self,
        db: Session,
        search: Optional[str] = None,
        limit: RawParam = None,
        skip: RawParam = None,
    ) -> ProductPage:
        """
        One page of products whose name contains ``search`` (any case).

        Raises:
            ResourceNotFoundError: the resulting page is empty
        """
        total = db.scalar(select(func.count()).select_from(Product)) or 0
        window = resolve_window(total, limit, skip, self.max_limit)

        query = select(Product)
        if search:
            query = query.where(Product.name.ilike(f"%{_escape_like(search)}%", escape="\\"))
        query = (
            query.order_by(Product.created_at, Product.id)
            .offset(window.skip)
            .limit(window.limit)
        )
        products = list(db.scalars(query).all())

        logger.debug(
            f"Product page: search={search!r}, limit={window.limit}, skip={window.skip}, "
            f"returned={len(products)}, total={total}"
        )

        if not products:
            raise ResourceNotFoundError("Products")

        return ProductPage(products=products, total=total, window=window)

    def top_products(self, db: Session, limit: int = TOP_PRODUCTS_LIMIT) -> List[Product]:
        query = select(Product).order_by(Product.rating.desc(), Product.created_at).limit(limit)
        products = list(db.scalars(query).all())
        if not products:
            raise ResourceNotFoundError("Products")
        return products

    def get_product(self, db: Session, product_id: UUID) -> Product:
        product = db.get(Product, product_id)
        if product is None:
            raise ResourceNotFoundError("Product", product_id)
        return product

    # Mutations

    def create_product(
        self,
        db: Session,
        owner: UserIdentity,
        data: ProductCreate,
        upload: Optional[Upload],
    ) -> Product:
        """Create a product; the image upload is mandatory."""
        image_path = self.images.accept_upload(upload)

        product = Product(
            user_id=owner.id,
            name=data.name,
            description=data.description,
            brand=data.brand,
            category=data.category,
            price=data.price,
            count_in_stock=data.count_in_stock,
            image=image_path,
            rating=0.0,
            num_reviews=0,
        )
        db.add(product)
        try:
            db.commit()
        except Exception:
            db.rollback()
            # Nothing references the new file yet
            self.images.storage.delete(image_path)
            raise
        db.refresh(product)

        logger.info(f"Product created: id={product.id}, name={product.name!r}, by={owner.id}")
        return product

    def update_product(
        self,
        db: Session,
        product_id: UUID,
        changes: ProductUpdate,
        schedule: Scheduler,
    ) -> Product:
        """
        Apply supplied fields only; absent fields keep their stored value.

        The old image file is scheduled for removal only after the commit
        succeeds and only if the image reference changed.
        """
        product = self.get_product(db, product_id)
        previous_image = product.image

        supplied = changes.supplied_fields()
        for field, value in supplied.items():
            setattr(product, field, value)

        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            raise ConcurrentModificationError("Product", product_id)

        db.refresh(product)
        replaced = self.images.after_update(previous_image, product.image, schedule)

        logger.info(
            f"Product updated: id={product.id}, fields={sorted(supplied)}, image_replaced={replaced}"
        )
        return product

    def delete_product(self, db: Session, product_id: UUID, schedule: Scheduler) -> None:
        """Delete the record, then schedule removal of its image file."""
        product = self.get_product(db, product_id)
        image = product.image

        db.delete(product)
        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            raise ConcurrentModificationError("Product", product_id)

        self.images.after_delete(image, schedule)
        logger.info(f"Product deleted: id={product_id}")
