"""Order DRF serializers for API output.

Input (the checkout cart) is validated by ``CheckoutDTO``; these
serializers only render the order history from the stored snapshots.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    """Order line as bought: snapshot name and price, never the live catalog."""

    class Meta:
        model = OrderItem
        fields = ["product_id", "product_name", "quantity", "unit_price"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "total_amount",
            "status",
            "payment_status",
            "shipping_address",
            "created_at",
            "items",
        ]
        read_only_fields = fields
