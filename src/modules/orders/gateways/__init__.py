"""Payment gateway package."""

from modules.orders.gateways.interfaces import (
    IPaymentGateway,
    PaymentEvent,
    PaymentLineItem,
    PaymentSession,
)
from modules.orders.gateways.stripe_gateway import StripePaymentGateway

__all__ = [
    "IPaymentGateway",
    "PaymentEvent",
    "PaymentLineItem",
    "PaymentSession",
    "StripePaymentGateway",
]
