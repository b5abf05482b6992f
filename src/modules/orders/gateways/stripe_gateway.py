"""Stripe implementation of ``IPaymentGateway``.

Uses Stripe Checkout (hosted payment page) in ``payment`` mode and
Stripe's signed webhooks.  Amounts are converted from ``Decimal`` to the
integer minor unit Stripe expects; zero-decimal currencies (``jpy``,
``krw`` …) are sent as whole units.
"""

from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

import stripe
import structlog

from modules.orders.constants import ZERO_DECIMAL_CURRENCIES
from modules.orders.exceptions import InvalidSignature, PaymentSessionFailed
from modules.orders.gateways.interfaces import (
    IPaymentGateway,
    PaymentEvent,
    PaymentLineItem,
    PaymentSession,
)

logger = structlog.get_logger(__name__)


def to_minor_units(amount: Decimal, currency: str) -> int:
    """``Decimal("19.99"), "usd"`` -> ``1999``; ``Decimal("500"), "jpy"`` -> ``500``."""
    if currency.lower() in ZERO_DECIMAL_CURRENCIES:
        return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StripePaymentGateway(IPaymentGateway):
    """Concrete gateway backed by the ``stripe`` SDK.

    The API key is passed per request rather than set on the module so
    several gateways (e.g. tests with different keys) never interfere.
    """

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        currency: str,
        api_version: Optional[str] = None,
    ) -> None:
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._currency = currency.lower()
        self._api_version = api_version

    @classmethod
    def from_settings(cls) -> StripePaymentGateway:
        from django.conf import settings

        return cls(
            secret_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            currency=settings.STOREFRONT_CURRENCY,
            api_version=settings.STRIPE_API_VERSION,
        )

    # ------------------------------------------------------------------
    # Checkout Session
    # ------------------------------------------------------------------

    def _line_item(self, item: PaymentLineItem) -> Dict[str, Any]:
        return {
            "price_data": {
                "currency": self._currency,
                "product_data": {"name": item.name},
                "unit_amount": to_minor_units(item.unit_price, self._currency),
            },
            "quantity": item.quantity,
        }

    def create_checkout_session(
        self,
        line_items: List[PaymentLineItem],
        metadata: Dict[str, str],
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str] = None,
    ) -> PaymentSession:
        params: Dict[str, Any] = {
            "mode": "payment",
            "line_items": [self._line_item(item) for item in line_items],
            "metadata": metadata,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "api_key": self._secret_key,
        }
        if customer_email:
            params["customer_email"] = customer_email
        if self._api_version:
            params["stripe_version"] = self._api_version

        try:
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as exc:
            logger.error(
                "stripe.checkout_session_failed",
                error=str(exc),
                order_id=metadata.get("order_id"),
            )
            raise PaymentSessionFailed(str(exc)) from exc

        logger.info(
            "stripe.checkout_session_created",
            session_id=session.id,
            order_id=metadata.get("order_id"),
        )
        return PaymentSession(id=session.id, url=session.url)

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        """Verify the ``Stripe-Signature`` header, then parse the raw body.

        Parsing happens only after verification, and on the exact bytes
        that were signed.
        """
        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body, signature, self._webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE
            )
            event = json.loads(body)
        except stripe.SignatureVerificationError as exc:
            logger.warning("stripe.webhook_signature_invalid", error=str(exc))
            raise InvalidSignature("Webhook signature verification failed.") from exc
        except ValueError as exc:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            logger.warning("stripe.webhook_payload_invalid", error=str(exc))
            raise InvalidSignature("Webhook payload could not be parsed.") from exc

        if not isinstance(event, dict):
            raise InvalidSignature("Webhook payload is not an event object.")

        obj = (event.get("data") or {}).get("object") or {}
        raw_metadata = obj.get("metadata") or {}
        metadata = {str(k): str(v) for k, v in raw_metadata.items() if v is not None}
        logger.info("stripe.webhook_verified", event_type=event.get("type"))
        return PaymentEvent(
            type=str(event.get("type", "")),
            session_id=obj.get("id"),
            metadata=metadata,
        )
