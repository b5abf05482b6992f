"""Order URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.orders.views import CheckoutView, OrderListView, PaymentWebhookView

urlpatterns = [
    path("orders/", OrderListView.as_view(), name="order-list"),
    path("orders/checkout/", CheckoutView.as_view(), name="order-checkout"),
    path("orders/webhook/", PaymentWebhookView.as_view(), name="order-webhook"),
]
