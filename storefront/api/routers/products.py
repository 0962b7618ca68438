"""
Product Endpoints
GET    /products              - Paginated, searchable catalog
GET    /products/top          - Highest rated products
GET    /products/{id}         - Single product
POST   /products              - Create product with image (admin)
POST   /products/upload       - Store a replacement image (admin)
PUT    /products/{id}         - Partial update (admin)
DELETE /products/{id}         - Delete product and its image (admin)
POST   /products/reviews/{id} - Review a product (authenticated)
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from ..dependencies import (
    get_catalog_service,
    get_current_user,
    get_db,
    get_image_storage,
    get_review_service,
    require_admin,
)
from ..schemas.auth import UserIdentity
from ..schemas.common import AUTH_RESPONSES, NOT_FOUND_RESPONSES, ErrorResponse, MessageResponse
from ..schemas.product import (
    ImageUploadResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    ReviewCreate,
)
from ..services.catalog_service import CatalogService
from ..services.image_service import ImageLifecycle, ImageStorage
from ..services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/products", tags=["products"])


@router.get("", response_model=ProductListResponse, responses=NOT_FOUND_RESPONSES)
def list_products(
    search: Optional[str] = Query(None, max_length=200, description="Case-insensitive name filter"),
    limit: Optional[str] = Query(None, description="Page size (clamped to the server maximum)"),
    skip: Optional[str] = Query(None, description="Number of products to skip (clamped)"),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductListResponse:
    """
    List products.

    ``limit`` and ``skip`` are never rejected: missing, malformed or
    out-of-range values are clamped to a valid window.
    """
    page = catalog.list_products(db, search=search, limit=limit, skip=skip)

    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in page.products],
        total=page.total,
        max_limit=page.window.max_limit,
        max_skip=page.window.max_skip,
    )


@router.get("/top", response_model=List[ProductResponse], responses=NOT_FOUND_RESPONSES)
def get_top_products(
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Top 3 products by rating."""
    return catalog.top_products(db)


@router.get("/{product_id}", response_model=ProductResponse, responses=NOT_FOUND_RESPONSES)
def get_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return catalog.get_product(db, product_id)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Image missing or invalid fields"},
        **AUTH_RESPONSES,
    },
)
def create_product(
    name: str = Form(..., min_length=1, max_length=255),
    description: str = Form(..., min_length=1),
    brand: str = Form(..., min_length=1, max_length=255),
    category: str = Form(..., min_length=1, max_length=255),
    price: float = Form(..., ge=0),
    count_in_stock: int = Form(..., ge=0, alias="countInStock"),
    image: Optional[UploadFile] = File(None),
    admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """
    Create a product.

    Multipart form with the product fields and exactly one image file.
    The image is mandatory.
    """
    data = ProductCreate(
        name=name,
        description=description,
        brand=brand,
        category=category,
        price=price,
        count_in_stock=count_in_stock,
    )
    return catalog.create_product(db, owner=admin, data=data, upload=image)


@router.post(
    "/upload",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Image missing"}, **AUTH_RESPONSES},
)
def upload_image(
    image: Optional[UploadFile] = File(None),
    admin: UserIdentity = Depends(require_admin),
    storage: ImageStorage = Depends(get_image_storage),
) -> ImageUploadResponse:
    """
    Store an image without attaching it to a product.

    The returned path can be sent as ``image`` in a product update.
    """
    path = ImageLifecycle(storage).accept_upload(image)
    logger.info(f"Image uploaded by {admin.id}: {path}")
    return ImageUploadResponse(message="Image uploaded successfully", image=path)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={**NOT_FOUND_RESPONSES, **AUTH_RESPONSES},
)
def update_product(
    product_id: UUID,
    changes: ProductUpdate,
    background_tasks: BackgroundTasks,
    admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """
    Update a product.

    Only fields present in the body are changed. If the image reference
    changes, the previous file is removed after the update is saved.
    """
    return catalog.update_product(db, product_id, changes, schedule=background_tasks.add_task)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND_RESPONSES, **AUTH_RESPONSES},
)
def delete_product(
    product_id: UUID,
    background_tasks: BackgroundTasks,
    admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    catalog.delete_product(db, product_id, schedule=background_tasks.add_task)
    return MessageResponse(message="Product deleted successfully")


@router.post(
    "/reviews/{product_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Product already reviewed"},
        **NOT_FOUND_RESPONSES,
        **AUTH_RESPONSES,
    },
)
def create_product_review(
    product_id: UUID,
    review: ReviewCreate,
    current_user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    reviews: ReviewService = Depends(get_review_service),
) -> MessageResponse:
    """Review a product. Each user may review a product once."""
    reviews.add_review(
        db,
        product_id=product_id,
        reviewer=current_user,
        rating=review.rating,
        comment=review.comment,
    )
    return MessageResponse(message="Review added successfully")
