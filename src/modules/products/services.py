"""Product service layer (Use Cases).

Orchestrates catalog reads and staff maintenance of products,
delegating persistence to the injected ``IProductRepository``.

Business rules enforced here:
- Price must be greater than zero (validated by DTO).
- Stock cannot be negative (validated by DTO).
- Delete is a soft delete; historical order lines keep their product.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List

import structlog
from django.db import transaction

from modules.products.constants import (
    HOME_HOT_ITEMS_LIMIT,
    HOME_NEW_ARRIVAL_LIMIT,
    HOME_PICK_UP_LIMIT,
)
from modules.products.exceptions import ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for catalog use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        product = Product(
            name=dto.name,
            price=dto.price,
            description=dto.description,
            stock=dto.stock,
            image_url=dto.image_url,
            is_featured=dto.is_featured,
        )
        product = self._repo.save(product)
        logger.info("product.created", product_id=product.id)
        return product

    @transaction.atomic
    def update_product(self, id: int, dto: UpdateProductDTO) -> Product:
        """Update an existing product with the supplied fields.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        for field, value in dto.model_dump(exclude_none=True).items():
            setattr(product, field, value)

        product = self._repo.save(product)
        logger.info("product.updated", product_id=id)
        return product

    @transaction.atomic
    def delete_product(self, id: int) -> None:
        """Soft-delete a product.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        if not self._repo.delete(id):
            raise ProductNotFound(f"Product {id} not found.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def catalog(self) -> QuerySet:
        """Live products with review aggregates; filtering/paging is the caller's."""
        return self._repo.catalog()

    def get_product(self, id: int) -> Product:
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def home_sections(self) -> Dict[str, List[Product]]:
        return {
            "pick_up": self._repo.best_sellers(HOME_PICK_UP_LIMIT),
            "new_arrival": self._repo.newest(HOME_NEW_ARRIVAL_LIMIT),
            "hot_items": self._repo.random_featured(HOME_HOT_ITEMS_LIMIT),
        }
