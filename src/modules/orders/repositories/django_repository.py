"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Every query
is parameter-bound by the ORM.

The payment guard lives in a single ``UPDATE … WHERE`` statement: the
row is matched on (order id AND owner) and skipped when it is already in
``payment_success``.  Two racing confirmations therefore cannot both
report an affected row.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Sequence

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from modules.orders.constants import FINAL_PAYMENT_STATUS
from modules.orders.dtos import OrderLineDTO, OrderUpdateDTO
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(
        self,
        user_id: int,
        lines: Sequence[OrderLineDTO],
        shipping_address: str,
        total_amount: Decimal,
    ) -> Order:
        order = Order.objects.create(
            user_id=user_id,
            total_amount=total_amount,
            shipping_address=shipping_address,
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in lines
            ]
        )
        logger.info("order.persisted", order_id=order.id, item_count=len(lines))
        return order

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def attach_payment_session(
        self, order_id: int, user_id: int, session_id: str
    ) -> int:
        return Order.objects.filter(id=order_id, user_id=user_id).update(
            payment_session_id=session_id, updated_at=timezone.now()
        )

    def update_unless_paid(
        self, order_id: int, user_id: int, changes: OrderUpdateDTO
    ) -> int:
        fields = changes.as_fields()
        if not fields:
            return 0
        return (
            Order.objects.filter(id=order_id, user_id=user_id)
            .exclude(payment_status=FINAL_PAYMENT_STATUS)
            .update(**fields, updated_at=timezone.now())
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_lines(self, order_id: int) -> List[OrderItem]:
        return list(OrderItem.objects.filter(order_id=order_id).order_by("id"))

    def list_for_user(self, user_id: int) -> QuerySet:
        return (
            Order.objects.filter(user_id=user_id)
            .prefetch_related("items")
            .order_by("-created_at", "-id")
        )
