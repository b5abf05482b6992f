"""A user's bookmarked products."""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class Favorite(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="favorites",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="favorited_by",
    )

    class Meta:
        db_table = "favorites"
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "product"], name="favorites_user_product_unique"
            ),
        ]

    def __str__(self) -> str:
        return f"user #{self.user_id} -> product #{self.product_id}"
