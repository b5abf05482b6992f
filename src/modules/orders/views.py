"""Order API views.

Exposes checkout, order history and the payment-provider webhook.
Domain exceptions are caught and translated into a single user-facing
``{"message": ...}`` body; the underlying condition is logged, never
returned.
"""

from __future__ import annotations

import structlog
from django.conf import settings
from django.db import DatabaseError
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.exceptions import pydantic_error_message
from modules.orders.dtos import CheckoutDTO
from modules.orders.exceptions import (
    InvalidOrder,
    InvalidSignature,
    MissingOrderMetadata,
    OrderCreationFailed,
    OutOfStock,
    PaymentSessionFailed,
    ProductNotFound,
    ProductsNotFound,
)
from modules.orders.gateways.stripe_gateway import StripePaymentGateway
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderSerializer
from modules.orders.services import (
    CheckoutService,
    OrderService,
    PaymentWebhookService,
    StockReconciler,
)
from modules.products.repositories.django_repository import ProductDjangoRepository

logger = structlog.get_logger(__name__)

CHECKOUT_FAILED_MESSAGE = "Failed to register order or process payment."


def build_order_service() -> OrderService:
    order_repository = OrderDjangoRepository()
    return OrderService(
        order_repository=order_repository,
        stock_reconciler=StockReconciler(
            order_repository=order_repository,
            product_repository=ProductDjangoRepository(),
        ),
    )


class CheckoutView(APIView):
    """POST /api/v1/orders/checkout/

    Body: ``{"items": [{"id": 7, "quantity": 2}], "address": "..."}``.
    Any ``price`` / ``name`` sent with an item is ignored.
    Returns ``{"url": <hosted payment page>}``.
    """

    permission_classes = [IsAuthenticated]
    throttle_scope = "checkout"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CheckoutService(
            product_repository=ProductDjangoRepository(),
            order_service=build_order_service(),
            payment_gateway=StripePaymentGateway.from_settings(),
            shipping_fee=settings.STOREFRONT_SHIPPING_FEE,
            base_url=settings.STOREFRONT_BASE_URL,
        )

    def post(self, request: Request) -> Response:
        try:
            dto = CheckoutDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return Response(
                {"message": pydantic_error_message(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            result = self._service.checkout(
                user_id=request.user.pk,
                email=request.user.email,
                dto=dto,
            )
        except (OutOfStock, InvalidOrder) as exc:
            return Response({"message": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except (ProductsNotFound, ProductNotFound) as exc:
            return Response({"message": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except (OrderCreationFailed, PaymentSessionFailed) as exc:
            logger.error("checkout.failed", user_id=request.user.pk, error=str(exc))
            return Response(
                {"message": CHECKOUT_FAILED_MESSAGE},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"url": result.url})


class OrderListView(APIView):
    """GET /api/v1/orders/: the caller's orders, newest first."""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        orders = build_order_service().list_orders(request.user.pk)
        return Response({"orders": OrderSerializer(orders, many=True).data})


class PaymentWebhookView(APIView):
    """POST /api/v1/orders/webhook/

    Called by the payment provider, not by a browser: no session/cookie
    authentication, no throttling, and the raw body is read untouched so
    the signature can be checked over the exact bytes sent.

    Always answers ``{"received": true}`` with 200, except on a bad
    signature (400), so internal failures are logged, not retried.
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]
    throttle_classes: list = []

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = PaymentWebhookService(
            payment_gateway=StripePaymentGateway.from_settings(),
            order_service=build_order_service(),
        )

    def post(self, request: Request) -> Response:
        signature = request.META.get("HTTP_STRIPE_SIGNATURE", "")
        try:
            self._service.handle(request.body, signature)
        except InvalidSignature as exc:
            return Response({"message": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except MissingOrderMetadata as exc:
            logger.error("payment.webhook_missing_metadata", error=str(exc))
        except DatabaseError:
            logger.exception("payment.webhook_ledger_failed")

        return Response({"received": True})
