"""Contact-form inquiries submitted from the storefront."""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class Inquiry(BaseModel):
    name = models.CharField(max_length=100)
    email = models.EmailField(max_length=254)
    message = models.TextField()

    class Meta:
        db_table = "inquiries"
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "inquiries"

    def __str__(self) -> str:
        return f"Inquiry #{self.id} from {self.email}"
