"""
Review Service
Adds product reviews and keeps the product's aggregate rating in sync.
"""

import logging
from typing import Iterable, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...db.models import Product, Review
from ..errors import ConcurrentModificationError, DuplicateReviewError, ResourceNotFoundError
from ..schemas.auth import UserIdentity

logger = logging.getLogger(__name__)


def aggregate_ratings(ratings: Iterable[int]) -> Tuple[float, int]:
    """
    Mean rating and count of a full set of ratings.

    Always computed from the complete list so repeated writes never
    accumulate rounding drift. An empty set rates 0.
    """
    ratings = list(ratings)
    if not ratings:
        return 0.0, 0
    return sum(ratings) / len(ratings), len(ratings)


class ReviewService:
    """
    One review per user per product.

    The (product, user) unique constraint backs up the in-memory check, so
    concurrent first reviews from the same user cannot both be stored. A
    review that loses a race against another write to the same product is
    re-applied on a fresh copy of the product, up to ``max_attempts`` times.
    """

    def __init__(self, max_attempts: int = 3):
        self.max_attempts = max_attempts

    def add_review(
        self,
        db: Session,
        product_id: UUID,
        reviewer: UserIdentity,
        rating: int,
        comment: str,
    ) -> Review:
        for attempt in range(1, self.max_attempts + 1):
            # After a rollback everything is expired, so this reloads
            product = db.get(Product, product_id)
            if product is None:
                raise ResourceNotFoundError("Product", product_id)

            if any(review.user_id == reviewer.id for review in product.reviews):
                raise DuplicateReviewError(product_id)

            review = Review(
                user_id=reviewer.id,
                name=reviewer.name,
                rating=int(rating),
                comment=comment,
            )
            product.reviews.append(review)
            product.rating, product.num_reviews = aggregate_ratings(r.rating for r in product.reviews)

            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                logger.warning(
                    f"Concurrent duplicate review rejected: product={product_id}, user={reviewer.id}"
                )
                raise DuplicateReviewError(product_id)
            except StaleDataError:
                db.rollback()
                logger.info(
                    f"Product changed while adding review, retrying: product={product_id}, "
                    f"attempt={attempt}/{self.max_attempts}"
                )
                continue

            logger.info(
                f"Review added: product={product_id}, user={reviewer.id}, "
                f"rating={product.rating:.2f} over {product.num_reviews} reviews"
            )
            return review

        logger.warning(f"Giving up on review after {self.max_attempts} attempts: product={product_id}")
        raise ConcurrentModificationError("Product", product_id)
