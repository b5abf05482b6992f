"""Product model: catalog entry with stock and sales bookkeeping.

Business rules implemented:
- Price must be greater than zero (DB check constraint + DTO validation).
- ``stock`` and ``sales_count`` are unsigned; the database rejects a
  decrement that would take stock below zero.
- ``sales_count`` only ever grows; it is written exclusively by the stock
  reconciler after a confirmed payment.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel) so order
  lines keep pointing at the product they were bought from.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class Product(SoftDeleteModel):
    """Product aggregate root of the catalog."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    stock = models.PositiveIntegerField(default=0)
    sales_count = models.PositiveIntegerField(default=0)
    image_url = models.CharField(max_length=255, blank=True, default="")
    is_featured = models.BooleanField(default=False)

    class Meta:
        db_table = "products"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["-sales_count"], name="products_sales_idx"),
            models.Index(fields=["is_featured"], name="products_featured_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.name is not None and not self.name.strip():
            raise ValidationError({"name": "Name must not be empty."})
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info("product_created", product_id=self.id, name=self.name)

    def __str__(self) -> str:
        return f"#{self.id} {self.name}"
