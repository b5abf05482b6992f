"""Order and OrderItem models.

Business rules implemented:
- ``total_amount`` is computed server-side from catalog prices at
  checkout time; the client never supplies it.
- ``payment_status`` reaches ``payment_success`` at most once; the
  repository's guarded update refuses to touch such rows afterwards.
- Orders are never physically deleted; the user FK uses PROTECT to
  preserve financial history.
- OrderItem snapshots product name and price at creation time, so later
  catalog edits never change a past order.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import OrderStatus, PaymentStatus


class Order(BaseModel):
    """Order aggregate root.

    ``payment_session_id`` stays ``NULL`` between order creation and the
    moment the external checkout session is linked back to the row.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    shipping_address = models.TextField()
    payment_session_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="orders_user_created_idx"),
            models.Index(fields=["payment_status"], name="orders_payment_status_idx"),
        ]

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAYMENT_SUCCESS

    def __str__(self) -> str:
        return f"Order #{self.id} ({self.status}/{self.payment_status})"


class OrderItem(BaseModel):
    """Immutable order line.

    ``product_name`` and ``unit_price`` are snapshots of the catalog at
    purchase time.  ``product`` uses PROTECT; products are soft-deleted,
    so the reference always resolves.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "order_items"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} ({self.unit_price})"
