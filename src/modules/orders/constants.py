"""Order domain constants.

Status vocabularies for the order lifecycle and the payment-provider
values the checkout and webhook flows depend on.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    REFUNDED = "refunded", "Refunded"


class PaymentStatus(models.TextChoices):
    UNPAID = "unpaid", "Unpaid"
    PAYMENT_PROCESSING = "payment_processing", "Payment processing"
    PAYMENT_SUCCESS = "payment_success", "Payment succeeded"
    PAYMENT_FAILED = "payment_failed", "Payment failed"
    REFUND_PROCESSING = "refund_processing", "Refund processing"
    REFUNDED = "refunded", "Refunded"


# Once an order reaches this payment status the ledger refuses any further
# status / payment-status update.
FINAL_PAYMENT_STATUS = PaymentStatus.PAYMENT_SUCCESS

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"

SHIPPING_LINE_NAME = "Shipping"
SUCCESS_PATH = "/account?session_id={CHECKOUT_SESSION_ID}"
CANCEL_PATH = "/order-confirm"

# Currencies Stripe expects in whole units (no minor unit).
ZERO_DECIMAL_CURRENCIES: frozenset[str] = frozenset(
    {
        "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
        "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
    }
)
