"""Favorite use cases.

Adding is idempotent: a second add of the same product is a no-op.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import structlog

from modules.favorites.exceptions import FavoriteNotFound
from modules.favorites.models import Favorite
from modules.products.exceptions import ProductNotFound

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class FavoriteService:
    def __init__(self, product_repository: IProductRepository) -> None:
        self._products = product_repository

    def list_products(self, user_id: int) -> List[Product]:
        favorites = (
            Favorite.objects.filter(user_id=user_id, product__deleted_at__isnull=True)
            .select_related("product")
            .order_by("-created_at", "-id")
        )
        return [favorite.product for favorite in favorites]

    def add(self, user_id: int, product_id: int) -> bool:
        """Returns ``True`` when a new favorite was recorded."""
        if self._products.get_by_id(product_id) is None:
            raise ProductNotFound(f"Product {product_id} not found.")

        _, created = Favorite.objects.get_or_create(
            user_id=user_id, product_id=product_id
        )
        if created:
            logger.info("favorite.added", user_id=user_id, product_id=product_id)
        return created

    def is_favorite(self, user_id: int, product_id: int) -> bool:
        return Favorite.objects.filter(user_id=user_id, product_id=product_id).exists()

    def remove(self, user_id: int, product_id: int) -> None:
        deleted, _ = Favorite.objects.filter(
            user_id=user_id, product_id=product_id
        ).delete()
        if not deleted:
            raise FavoriteNotFound(f"Product {product_id} is not a favorite.")
        logger.info("favorite.removed", user_id=user_id, product_id=product_id)
