"""
Tests for review submission and rating aggregation.
"""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from storefront.api.errors import ConcurrentModificationError, DuplicateReviewError, ResourceNotFoundError
from storefront.api.services.review_service import ReviewService, aggregate_ratings
from storefront.db.models import Product, Review


def test_aggregate_of_empty_set_is_zero():
    assert aggregate_ratings([]) == (0.0, 0)


def test_aggregate_uses_float_division():
    rating, count = aggregate_ratings([5, 4])
    assert rating == pytest.approx(4.5)
    assert count == 2


class TestAddReview:

    def test_three_reviews_average(self, db, make_product, make_user, identity):
        product = make_product()
        service = ReviewService()

        for name, rating in [("Ann", 5), ("Bob", 3), ("Cid", 4)]:
            service.add_review(db, product.id, identity(make_user(name=name)), rating, "ok")

        db.expire_all()
        stored = db.get(Product, product.id)
        assert stored.rating == pytest.approx(4.0)
        assert stored.num_reviews == 3
        assert len(stored.reviews) == 3

    def test_rating_matches_mean_after_every_submission(self, db, make_product, make_user, identity):
        product = make_product()
        service = ReviewService()
        ratings = [1, 5, 2, 2, 5, 3, 4]

        for i, rating in enumerate(ratings):
            service.add_review(db, product.id, identity(make_user(name=f"User {i}")), rating, "text")
            db.expire_all()
            stored = db.get(Product, product.id)
            submitted = ratings[: i + 1]
            assert stored.rating == pytest.approx(sum(submitted) / len(submitted))
            assert stored.num_reviews == len(stored.reviews) == len(submitted)

    def test_reviewer_name_is_snapshotted(self, db, make_product, customer, identity):
        product = make_product()
        review = ReviewService().add_review(db, product.id, identity(customer), 4, "Nice")

        customer.name = "Jane Renamed"
        db.commit()
        db.expire_all()

        stored = db.get(Review, review.id)
        assert stored.name == "Jane Doe"
        assert stored.user_id == customer.id

    def test_second_review_by_same_user_rejected(self, db, make_product, customer, identity):
        product = make_product()
        service = ReviewService()
        service.add_review(db, product.id, identity(customer), 5, "Great")

        with pytest.raises(DuplicateReviewError):
            service.add_review(db, product.id, identity(customer), 1, "Changed my mind")

        db.expire_all()
        stored = db.get(Product, product.id)
        assert stored.num_reviews == 1
        assert stored.rating == pytest.approx(5.0)
        assert [r.comment for r in stored.reviews] == ["Great"]

    def test_same_user_may_review_different_products(self, db, make_product, customer, identity):
        service = ReviewService()
        first, second = make_product(), make_product()

        service.add_review(db, first.id, identity(customer), 5, "a")
        service.add_review(db, second.id, identity(customer), 2, "b")

        db.expire_all()
        assert db.get(Product, first.id).num_reviews == 1
        assert db.get(Product, second.id).num_reviews == 1

    def test_unknown_product(self, db, customer, identity):
        with pytest.raises(ResourceNotFoundError):
            ReviewService().add_review(db, uuid.uuid4(), identity(customer), 3, "?")

    def test_unique_constraint_backs_up_duplicate_check(self, db, make_product, customer):
        product = make_product()
        db.add(Review(product_id=product.id, user_id=customer.id, name="x", rating=3, comment="a"))
        db.commit()

        db.add(Review(product_id=product.id, user_id=customer.id, name="x", rating=4, comment="b"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_concurrent_duplicate_reported_as_duplicate(
        self, db, session_factory, make_product, customer, identity
    ):
        product = make_product()
        assert product.reviews == []  # loaded before the competing write

        # Another request stores this user's review in the meantime
        with session_factory() as other:
            other.add(Review(product_id=product.id, user_id=customer.id, name="Jane Doe",
                             rating=2, comment="first"))
            other.commit()

        with pytest.raises(DuplicateReviewError):
            ReviewService().add_review(db, product.id, identity(customer), 5, "second")

        db.expire_all()
        stored = db.get(Product, product.id)
        assert [r.comment for r in stored.reviews] == ["first"]

    def test_concurrent_review_by_other_user_is_kept(
        self, db, session_factory, make_product, make_user, identity
    ):
        product = make_product()
        bob, cid = make_user(name="Bob"), make_user(name="Cid")
        assert product.reviews == []  # loaded before the competing write

        # Another request reviews the same product in the meantime
        with session_factory() as other:
            ReviewService().add_review(other, product.id, identity(bob), 2, "meh")

        ReviewService().add_review(db, product.id, identity(cid), 4, "good")

        db.expire_all()
        stored = db.get(Product, product.id)
        assert sorted(r.name for r in stored.reviews) == ["Bob", "Cid"]
        assert stored.num_reviews == 2
        assert stored.rating == pytest.approx(3.0)

    def test_gives_up_after_repeated_conflicts(self, db, make_product, customer, identity, monkeypatch):
        product = make_product()
        attempts = []

        def conflicting_commit():
            attempts.append(1)
            raise StaleDataError("product row version changed")

        monkeypatch.setattr(db, "commit", conflicting_commit)

        with pytest.raises(ConcurrentModificationError):
            ReviewService(max_attempts=2).add_review(db, product.id, identity(customer), 5, "x")
        assert len(attempts) == 2

        monkeypatch.undo()
        db.expire_all()
        assert db.get(Product, product.id).num_reviews == 0
