"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderPaid, OrderPlaced
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderPlacedHandler(IEventHandler[OrderPlaced]):
    def handle(self, event: OrderPlaced) -> None:
        logger.info(
            "order.event.placed",
            order_id=event.aggregate_id,
            user_id=event.user_id,
            total_amount=str(event.total_amount),
        )


class OrderPaidHandler(IEventHandler[OrderPaid]):
    def handle(self, event: OrderPaid) -> None:
        logger.info(
            "order.event.paid",
            order_id=event.aggregate_id,
            user_id=event.user_id,
            lines_reconciled=event.lines_reconciled,
        )


order_placed_handler = OrderPlacedHandler()
order_paid_handler = OrderPaidHandler()
