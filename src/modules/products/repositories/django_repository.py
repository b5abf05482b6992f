"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: look-ups return ``None``
(or an empty collection) instead of raising HTTP-level exceptions; the
Service Layer decides how to translate a missing entity.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

import structlog
from django.db import transaction
from django.db.models import Avg, Count, F, QuerySet
from django.utils import timezone

from modules.products.constants import SORT_NEW, SORT_ORDERINGS
from modules.products.dtos import ProductPriceDTO, StockLevelDTO
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def _with_reviews(queryset: QuerySet) -> QuerySet:
    return queryset.annotate(
        review_avg=Avg("reviews__rating"),
        review_count=Count("reviews"),
    )


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Product]:
        """Retrieve a live product by primary key, ``None`` otherwise."""
        try:
            return Product.objects.alive().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.full_clean()
        entity.save()
        logger.info("product.saved", product_id=entity.id)
        return entity

    @transaction.atomic
    def delete(self, id: int) -> bool:
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=id)
        return True

    # ------------------------------------------------------------------
    # Catalog queries
    # ------------------------------------------------------------------

    def catalog(self) -> QuerySet:
        """Live products with review aggregates, newest first.

        The aggregates add a GROUP BY, which drops ``Meta.ordering``, so the
        default order is applied here explicitly.
        """
        return _with_reviews(Product.objects.alive()).order_by(
            *SORT_ORDERINGS[SORT_NEW]
        )

    def best_sellers(self, limit: int) -> List[Product]:
        return list(
            _with_reviews(Product.objects.alive()).order_by("-sales_count", "-id")[
                :limit
            ]
        )

    def newest(self, limit: int) -> List[Product]:
        return list(
            _with_reviews(Product.objects.alive()).order_by("-created_at", "-id")[
                :limit
            ]
        )

    def random_featured(self, limit: int) -> List[Product]:
        return list(
            _with_reviews(Product.objects.alive().filter(is_featured=True)).order_by(
                "?"
            )[:limit]
        )

    # ------------------------------------------------------------------
    # Checkout read models
    # ------------------------------------------------------------------

    def get_stock_levels(self, ids: Iterable[int]) -> Dict[int, StockLevelDTO]:
        rows = Product.objects.alive().filter(id__in=list(ids)).values(
            "id", "name", "stock"
        )
        return {row["id"]: StockLevelDTO(**row) for row in rows}

    def get_prices(self, ids: Iterable[int]) -> List[ProductPriceDTO]:
        rows = Product.objects.alive().filter(id__in=list(ids)).values(
            "id", "name", "price"
        )
        return [ProductPriceDTO(**row) for row in rows]

    # ------------------------------------------------------------------
    # Sale bookkeeping
    # ------------------------------------------------------------------

    def record_sale(self, id: int, quantity: int) -> int:
        """Single UPDATE statement; raises ``IntegrityError`` if stock would go negative."""
        return Product.objects.filter(id=id).update(
            stock=F("stock") - quantity,
            sales_count=F("sales_count") + quantity,
            updated_at=timezone.now(),
        )
