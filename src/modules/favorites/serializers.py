from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class FavoriteProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ["id", "name", "price", "image_url"]
        read_only_fields = fields


class FavoriteCreateSerializer(serializers.Serializer):
    productId = serializers.IntegerField(
        min_value=1,
        error_messages={"required": "Product ID is not specified."},
    )
