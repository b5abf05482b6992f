"""Review use cases: paginated listing with the product's average, and submission."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db.models import Avg

from modules.products.exceptions import ProductNotFound
from modules.reviews.models import Review

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ReviewService:
    def __init__(self, product_repository: IProductRepository) -> None:
        self._products = product_repository

    def list_for_product(self, product_id: int) -> QuerySet:
        return (
            Review.objects.filter(product_id=product_id)
            .select_related("user")
            .order_by("-created_at", "-id")
        )

    def average_rating(self, product_id: int) -> float:
        avg = Review.objects.filter(product_id=product_id).aggregate(avg=Avg("rating"))[
            "avg"
        ]
        return round(float(avg), 1) if avg is not None else 0.0

    def add_review(
        self, product_id: int, user_id: int, rating: int, content: str
    ) -> Review:
        """Raises ``ProductNotFound`` for unknown or soft-deleted products."""
        if self._products.get_by_id(product_id) is None:
            raise ProductNotFound(f"Product {product_id} not found.")

        review = Review.objects.create(
            product_id=product_id, user_id=user_id, rating=rating, content=content
        )
        logger.info(
            "review.created",
            review_id=review.id,
            product_id=product_id,
            user_id=user_id,
            rating=rating,
        )
        return review
