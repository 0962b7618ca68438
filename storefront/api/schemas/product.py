"""
Product request/response schemas.
Pydantic models for the catalog, reviews and image uploads.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from .common import CamelModel


class ReviewCreate(CamelModel):
    """Request schema for submitting a review."""

    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: str = Field(..., min_length=1, max_length=5000, description="Review text")


class ReviewResponse(CamelModel):
    id: UUID
    user_id: UUID
    name: str = Field(..., description="Reviewer name at the time of review")
    rating: int
    comment: str
    created_at: datetime


class ProductCreate(CamelModel):
    """Product fields submitted alongside the image upload."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    count_in_stock: int = Field(..., ge=0)


class ProductUpdate(CamelModel):
    """
    Partial product update.

    Fields that are absent or null keep their stored value.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    count_in_stock: Optional[int] = Field(None, ge=0)
    image: Optional[str] = Field(None, min_length=1, max_length=1024, description="Stored image path")

    def supplied_fields(self) -> dict:
        """Fields carrying a new value."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ProductResponse(CamelModel):
    id: UUID
    user_id: Optional[UUID] = None
    name: str
    description: str
    brand: str
    category: str
    price: float
    count_in_stock: int
    image: str
    rating: float
    num_reviews: int
    reviews: List[ReviewResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ProductListResponse(CamelModel):
    """One page of the catalog plus the bounds a client needs to page further."""

    products: List[ProductResponse]
    total: int = Field(..., description="Total number of products")
    max_limit: int = Field(..., description="Largest page size the server will return")
    max_skip: int = Field(..., description="Largest offset the server will honor")


class ImageUploadResponse(CamelModel):
    message: str
    image: str = Field(..., description="Stored image path")
