"""Product repository interface.

Extends ``IRepository[Product]`` with the catalog queries (listing,
home-page sections), the read models used by checkout (stock levels and
authoritative prices) and the single write checkout's payment
confirmation performs on a product row (``record_sale``).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db import models

    from modules.products.dtos import ProductPriceDTO, StockLevelDTO
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def delete(self, id: int) -> bool:
        """Soft-delete a product; ``False`` when it does not exist."""

    @abstractmethod
    def catalog(self) -> "models.QuerySet[Product]":
        """Live products annotated with ``review_avg`` / ``review_count``."""

    @abstractmethod
    def best_sellers(self, limit: int) -> List[Product]:
        """Top products by ``sales_count``."""

    @abstractmethod
    def newest(self, limit: int) -> List[Product]:
        """Most recently created products (with review aggregates)."""

    @abstractmethod
    def random_featured(self, limit: int) -> List[Product]:
        """A random sample of featured products (with review aggregates)."""

    @abstractmethod
    def get_stock_levels(self, ids: Iterable[int]) -> Dict[int, StockLevelDTO]:
        """Current stock for each live product id found, keyed by id."""

    @abstractmethod
    def get_prices(self, ids: Iterable[int]) -> List[ProductPriceDTO]:
        """One batch lookup of ``id / name / price`` for live products."""

    @abstractmethod
    def record_sale(self, id: int, quantity: int) -> int:
        """Decrement stock and increment sales count; returns affected rows."""

    @abstractmethod
    def get_by_id(self, id: int) -> Optional[Product]:
        """Retrieve a live (not soft-deleted) product."""
