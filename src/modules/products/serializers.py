"""Product DRF serializers for API output.

The serializers operate at the Interface layer (API Views).  Writes go
through Pydantic DTOs from ``dtos.py`` and the Service Layer.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Full product representation (detail, create, update)."""

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "stock",
            "sales_count",
            "image_url",
            "is_featured",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductCardSerializer(serializers.ModelSerializer):
    """Catalog card with review aggregates (requires the annotated queryset)."""

    review_avg = serializers.SerializerMethodField()
    review_count = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "price",
            "stock",
            "image_url",
            "updated_at",
            "review_avg",
            "review_count",
        ]
        read_only_fields = fields

    def get_review_avg(self, obj: Product) -> float:
        avg = getattr(obj, "review_avg", None)
        return round(float(avg), 1) if avg is not None else 0.0

    def get_review_count(self, obj: Product) -> int:
        return getattr(obj, "review_count", 0) or 0
