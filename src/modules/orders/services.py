"""Order service layer (Use Cases).

Four collaborating services make up the checkout / payment workflow:

- ``OrderService``: the order ledger.  Creates orders with their lines,
  links payment sessions, and applies the guarded status update.  When
  that update is the one that marks an order paid, it hands over to the
  stock reconciler inside the same transaction.
- ``StockReconciler``: decrements stock and increments sales counters
  for every line of a freshly paid order.  Each line is its own
  savepoint; a failing line is logged and does not undo the others.
- ``CheckoutService``: validates a cart against stock, prices it from
  the catalog (client prices are never read), creates the pending
  order and opens the hosted payment session.
- ``PaymentWebhookService``: verifies provider notifications and drives
  completed sessions to ``completed`` / ``payment_success``.

Known gap: the stock check at checkout and the decrement at payment time
are not one transaction, so two concurrent checkouts can both pass the
check.  The database refuses to take stock below zero; such a line is
logged by the reconciler.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import structlog
from django.db import DatabaseError, transaction

from modules.orders.constants import (
    CANCEL_PATH,
    CHECKOUT_SESSION_COMPLETED,
    SHIPPING_LINE_NAME,
    SUCCESS_PATH,
    OrderStatus,
    PaymentStatus,
)
from modules.orders.dtos import (
    CheckoutDTO,
    CheckoutResultDTO,
    OrderLineDTO,
    OrderUpdateDTO,
)
from modules.orders.events import OrderPaid, OrderPlaced
from modules.orders.exceptions import (
    InvalidOrder,
    MissingOrderMetadata,
    OrderCreationFailed,
    OutOfStock,
    ProductNotFound,
    ProductsNotFound,
)
from modules.orders.gateways.interfaces import PaymentLineItem
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.gateways.interfaces import IPaymentGateway
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.dtos import ProductPriceDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Stock Reconciler
# ---------------------------------------------------------------------------


class StockReconciler:
    """Applies a paid order's quantities to the catalog.

    Must only be invoked by ``OrderService.update_order`` after the
    guarded update affected a row; that guard is what makes it run once.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository

    def reconcile(self, order_id: int) -> int:
        """Record the sale of every line; returns how many lines succeeded."""
        log = logger.bind(order_id=order_id)
        reconciled = 0

        for line in self._order_repo.get_lines(order_id):
            try:
                with transaction.atomic():
                    affected = self._product_repo.record_sale(
                        line.product_id, line.quantity
                    )
            except DatabaseError:
                log.exception(
                    "stock.reconcile_line_failed",
                    product_id=line.product_id,
                    quantity=line.quantity,
                )
                continue

            if not affected:
                log.warning(
                    "stock.reconcile_line_missing_product",
                    product_id=line.product_id,
                )
                continue

            reconciled += 1
            log.info(
                "stock.reconciled",
                product_id=line.product_id,
                quantity=line.quantity,
            )

        return reconciled


# ---------------------------------------------------------------------------
# Order Ledger
# ---------------------------------------------------------------------------


class OrderService:
    """Application service for the order ledger.

    Receives its repository and the stock reconciler via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        stock_reconciler: StockReconciler,
    ) -> None:
        self._order_repo = order_repository
        self._reconciler = stock_reconciler

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(
        self,
        user_id: int,
        lines: Sequence[OrderLineDTO],
        shipping_address: str,
        total_amount: Decimal,
    ) -> int:
        """Persist a pending/unpaid order and its lines; returns the order id.

        Raises:
            InvalidOrder: no lines, blank address or non-positive total.
            OrderCreationFailed: the database produced no order id.
        """
        if not lines:
            raise InvalidOrder("No products selected.")
        if not shipping_address or not shipping_address.strip():
            raise InvalidOrder("Shipping address is required.")
        if total_amount <= 0:
            raise InvalidOrder("Order total must be greater than zero.")

        log = logger.bind(user_id=user_id)
        try:
            order = self._order_repo.create(
                user_id=user_id,
                lines=lines,
                shipping_address=shipping_address.strip(),
                total_amount=total_amount,
            )
        except DatabaseError as exc:
            log.exception("order.create_failed")
            raise OrderCreationFailed("Failed to register order.") from exc

        if order is None or order.pk is None:
            log.error("order.create_returned_no_id")
            raise OrderCreationFailed("Failed to register order.")

        log.info("order.created", order_id=order.pk, total_amount=str(total_amount))
        event_bus.publish_on_commit(
            OrderPlaced(
                aggregate_id=order.pk, user_id=user_id, total_amount=total_amount
            )
        )
        return order.pk

    def attach_payment_session(
        self, user_id: int, order_id: int, session_id: str
    ) -> int:
        affected = self._order_repo.attach_payment_session(
            order_id=order_id, user_id=user_id, session_id=session_id
        )
        if not affected:
            logger.warning(
                "order.session_link_missed", order_id=order_id, user_id=user_id
            )
        return affected

    @transaction.atomic
    def update_order(
        self, user_id: int, order_id: int, changes: OrderUpdateDTO
    ) -> int:
        """Apply a typed partial update, refusing orders already paid.

        Returns the number of affected rows.  When this call is the one
        that sets ``payment_success`` the stock reconciler runs before the
        transaction commits; a second, duplicate confirmation affects zero
        rows and never reaches it.
        """
        log = logger.bind(order_id=order_id, user_id=user_id)
        if changes.is_empty:
            log.debug("order.update_noop")
            return 0

        affected = self._order_repo.update_unless_paid(
            order_id=order_id, user_id=user_id, changes=changes
        )
        if not affected:
            log.info("order.update_skipped", **changes.as_fields())
            return 0

        log.info("order.updated", **changes.as_fields())

        if changes.marks_paid:
            reconciled = self._reconciler.reconcile(order_id)
            event_bus.publish_on_commit(
                OrderPaid(
                    aggregate_id=order_id,
                    user_id=user_id,
                    lines_reconciled=reconciled,
                )
            )
        return affected

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_orders(self, user_id: int) -> QuerySet:
        return self._order_repo.list_for_user(user_id)


# ---------------------------------------------------------------------------
# Checkout Orchestrator
# ---------------------------------------------------------------------------


class CheckoutService:
    """Turns a client cart into a pending order plus a hosted payment page."""

    def __init__(
        self,
        product_repository: IProductRepository,
        order_service: OrderService,
        payment_gateway: IPaymentGateway,
        shipping_fee: Decimal,
        base_url: str,
    ) -> None:
        self._product_repo = product_repository
        self._orders = order_service
        self._gateway = payment_gateway
        self._shipping_fee = shipping_fee
        self._base_url = base_url.rstrip("/")

    def checkout(
        self, user_id: int, email: Optional[str], dto: CheckoutDTO
    ) -> CheckoutResultDTO:
        """Run the whole checkout; returns the payment page URL.

        Raises:
            OutOfStock: at least one line exceeds stock (all are named).
            InvalidOrder: empty cart, blank address or non-positive total.
            ProductsNotFound / ProductNotFound: pricing lookup came back short.
            OrderCreationFailed: the ledger could not persist the order.
            PaymentSessionFailed: the provider refused the session.
        """
        log = logger.bind(user_id=user_id, line_count=len(dto.items))
        log.info("checkout.started")

        self._check_stock(dto)

        if not dto.items:
            raise InvalidOrder("No products selected.")

        lines = self._price_lines(dto)
        total = sum((line.subtotal for line in lines), Decimal("0")) + self._shipping_fee

        order_id = self._orders.create_order(
            user_id=user_id,
            lines=lines,
            shipping_address=dto.address,
            total_amount=total,
        )
        log = log.bind(order_id=order_id)

        session = self._gateway.create_checkout_session(
            line_items=self._payment_line_items(lines),
            metadata={"order_id": str(order_id), "user_id": str(user_id)},
            success_url=f"{self._base_url}{SUCCESS_PATH}",
            cancel_url=f"{self._base_url}{CANCEL_PATH}",
            customer_email=email or None,
        )

        self._orders.attach_payment_session(
            user_id=user_id, order_id=order_id, session_id=session.id
        )
        log.info("checkout.session_opened", session_id=session.id, total=str(total))
        return CheckoutResultDTO(order_id=order_id, session_id=session.id, url=session.url)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _check_stock(self, dto: CheckoutDTO) -> None:
        levels = self._product_repo.get_stock_levels(dto.product_ids)
        shortages: List[str] = []
        for item in dto.items:
            level = levels.get(item.id)
            if level is None:
                shortages.append(f"ID:{item.id}")
            elif level.stock < item.quantity:
                shortages.append(level.name)

        if shortages:
            logger.info("checkout.out_of_stock", shortages=shortages)
            raise OutOfStock(shortages)

    def _price_lines(self, dto: CheckoutDTO) -> List[OrderLineDTO]:
        prices = self._product_repo.get_prices(dto.product_ids)
        if not prices:
            raise ProductsNotFound()

        by_id: Dict[int, ProductPriceDTO] = {p.id: p for p in prices}
        lines: List[OrderLineDTO] = []
        for item in dto.items:
            product = by_id.get(item.id)
            if product is None:
                raise ProductNotFound(item.id)
            lines.append(
                OrderLineDTO(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=item.quantity,
                    unit_price=product.price,
                )
            )
        return lines

    def _payment_line_items(self, lines: Sequence[OrderLineDTO]) -> List[PaymentLineItem]:
        items = [
            PaymentLineItem(
                name=line.product_name, unit_price=line.unit_price, quantity=line.quantity
            )
            for line in lines
        ]
        items.append(
            PaymentLineItem(
                name=SHIPPING_LINE_NAME, unit_price=self._shipping_fee, quantity=1
            )
        )
        return items


# ---------------------------------------------------------------------------
# Payment Confirmation Handler
# ---------------------------------------------------------------------------


class PaymentWebhookService:
    """Verifies provider notifications and settles completed sessions."""

    def __init__(
        self, payment_gateway: IPaymentGateway, order_service: OrderService
    ) -> None:
        self._gateway = payment_gateway
        self._orders = order_service

    def handle(self, payload: bytes, signature: str) -> int:
        """Process one notification; returns the ledger's affected rows.

        Raises:
            InvalidSignature: the notification is not authentic.
            MissingOrderMetadata: a completed session carries no order/user id.
        """
        event = self._gateway.construct_event(payload, signature)
        log = logger.bind(event_type=event.type, session_id=event.session_id)

        if event.type != CHECKOUT_SESSION_COMPLETED:
            log.info("payment.webhook_ignored")
            return 0

        try:
            order_id = int(event.metadata["order_id"])
            user_id = int(event.metadata["user_id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise MissingOrderMetadata(
                f"Completed session {event.session_id} has no usable order metadata."
            ) from exc

        affected = self._orders.update_order(
            user_id=user_id,
            order_id=order_id,
            changes=OrderUpdateDTO(
                status=OrderStatus.COMPLETED,
                payment_status=PaymentStatus.PAYMENT_SUCCESS,
            ),
        )
        if affected:
            log.info("payment.confirmed", order_id=order_id)
        else:
            log.info("payment.duplicate_or_unknown", order_id=order_id)
        return affected
