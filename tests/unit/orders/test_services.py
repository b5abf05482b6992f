"""Unit tests for the order services.

Covers:
- CheckoutService: stock check, server-side pricing, order creation and
  the hosted payment session.
- OrderService: creation rules and the one-shot payment guard.
- StockReconciler: per-line isolation of stock bookkeeping.
- PaymentWebhookService: event filtering and metadata handling.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.db import DatabaseError

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.dtos import CheckoutDTO, OrderLineDTO, OrderUpdateDTO
from modules.orders.events import OrderPaid, OrderPlaced
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
from modules.orders.gateways.interfaces import PaymentEvent
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import (
    CheckoutService,
    OrderService,
    PaymentWebhookService,
    StockReconciler,
)
from modules.products.repositories.django_repository import ProductDjangoRepository
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit

PAID = OrderUpdateDTO(
    status=OrderStatus.COMPLETED, payment_status=PaymentStatus.PAYMENT_SUCCESS
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def checkout_service(order_service, fake_gateway):
    return CheckoutService(
        product_repository=ProductDjangoRepository(),
        order_service=order_service,
        payment_gateway=fake_gateway,
        shipping_fee=Decimal("5.00"),
        base_url="http://shop.test/",
    )


@pytest.fixture()
def captured_events(monkeypatch):
    bus = InMemoryEventBus()
    events = []

    class CapturingHandler:
        def handle(self, event) -> None:
            events.append(event)

    handler = CapturingHandler()
    bus.subscribe(OrderPlaced, handler)
    bus.subscribe(OrderPaid, handler)
    monkeypatch.setattr("modules.orders.services.event_bus", bus)
    return events


def _cart(*items, address="1-2-3 Shibuya, Tokyo") -> CheckoutDTO:
    return CheckoutDTO.model_validate(
        {
            "items": [{"id": pid, "quantity": qty} for pid, qty in items],
            "address": address,
        }
    )


def _order_with_lines(user, *lines) -> Order:
    order = Order.objects.create(
        user=user, total_amount=Decimal("10.00"), shipping_address="Tokyo"
    )
    for product, quantity in lines:
        OrderItem.objects.create(
            order=order,
            product=product,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.price,
        )
    return order


# ---------------------------------------------------------------------------
# Checkout Orchestrator
# ---------------------------------------------------------------------------


class TestCheckout:
    def test_successful_checkout(self, checkout_service, fake_gateway, user, make_product):
        product = make_product(name="Mug", price=Decimal("19.99"), stock=10)

        result = checkout_service.checkout(user.id, user.email, _cart((product.id, 2)))

        order = Order.objects.get(pk=result.order_id)
        assert order.total_amount == Decimal("44.98")
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.UNPAID
        assert order.shipping_address == "1-2-3 Shibuya, Tokyo"
        assert order.payment_session_id == result.session_id
        assert result.url == f"https://checkout.stripe.test/pay/{result.session_id}"

        item = order.items.get()
        assert (item.product_id, item.quantity) == (product.id, 2)
        assert (item.product_name, item.unit_price) == ("Mug", Decimal("19.99"))

    def test_session_carries_lines_shipping_and_metadata(
        self, checkout_service, fake_gateway, user, make_product
    ):
        product = make_product(name="Mug", price=Decimal("19.99"))

        result = checkout_service.checkout(user.id, user.email, _cart((product.id, 2)))

        session = fake_gateway.sessions[0]
        names = [(li.name, li.unit_price, li.quantity) for li in session["line_items"]]
        assert names == [("Mug", Decimal("19.99"), 2), ("Shipping", Decimal("5.00"), 1)]
        assert session["metadata"] == {
            "order_id": str(result.order_id),
            "user_id": str(user.id),
        }
        assert session["success_url"] == (
            "http://shop.test/account?session_id={CHECKOUT_SESSION_ID}"
        )
        assert session["cancel_url"] == "http://shop.test/order-confirm"
        assert session["customer_email"] == "buyer@example.com"

    def test_checkout_does_not_touch_stock(self, checkout_service, user, make_product):
        product = make_product(stock=3)
        checkout_service.checkout(user.id, user.email, _cart((product.id, 3)))
        product.refresh_from_db()
        assert product.stock == 3
        assert product.sales_count == 0

    def test_out_of_stock_names_every_short_line(
        self, checkout_service, fake_gateway, user, make_product
    ):
        short = make_product(name="Teapot", stock=1)
        empty = make_product(name="Whisk", stock=0)
        fine = make_product(name="Mug", stock=10)

        with pytest.raises(OutOfStock) as exc_info:
            checkout_service.checkout(
                user.id,
                user.email,
                _cart((short.id, 2), (fine.id, 1), (empty.id, 1), (999_999, 1)),
            )

        assert exc_info.value.shortages == ["Teapot", "Whisk", "ID:999999"]
        assert str(exc_info.value) == "Items out of stock: Teapot, Whisk, ID:999999"
        assert Order.objects.count() == 0
        assert fake_gateway.sessions == []

    def test_soft_deleted_product_is_out_of_stock(
        self, checkout_service, user, make_product
    ):
        product = make_product()
        product.delete()
        with pytest.raises(OutOfStock, match=f"ID:{product.id}"):
            checkout_service.checkout(user.id, user.email, _cart((product.id, 1)))

    def test_empty_cart_rejected(self, checkout_service, user):
        with pytest.raises(InvalidOrder, match="No products selected."):
            checkout_service.checkout(user.id, user.email, _cart())

    def test_blank_address_rejected(self, checkout_service, fake_gateway, user, make_product):
        product = make_product()
        with pytest.raises(InvalidOrder, match="Shipping address is required."):
            checkout_service.checkout(
                user.id, user.email, _cart((product.id, 1), address="   ")
            )
        assert Order.objects.count() == 0
        assert fake_gateway.sessions == []

    def test_no_prices_found(self, order_service, fake_gateway, user, make_product):
        class NoPrices(ProductDjangoRepository):
            def get_prices(self, ids):
                return []

        product = make_product()
        service = CheckoutService(
            NoPrices(), order_service, fake_gateway, Decimal("5.00"), "http://shop.test"
        )
        with pytest.raises(ProductsNotFound, match="Products not found."):
            service.checkout(user.id, user.email, _cart((product.id, 1)))

    def test_partial_prices_name_missing_product(
        self, order_service, fake_gateway, user, make_product
    ):
        a, b = make_product(), make_product()

        class PartialPrices(ProductDjangoRepository):
            def get_prices(self, ids):
                return [p for p in super().get_prices(ids) if p.id == a.id]

        service = CheckoutService(
            PartialPrices(), order_service, fake_gateway, Decimal("5.00"), "http://shop.test"
        )
        with pytest.raises(ProductNotFound, match=f"Product ID {b.id} not found."):
            service.checkout(user.id, user.email, _cart((a.id, 1), (b.id, 1)))
        assert Order.objects.count() == 0

    def test_gateway_failure_leaves_order_without_session(
        self, checkout_service, fake_gateway, user, make_product
    ):
        product = make_product()
        fake_gateway.fail_with = "card_declined"

        with pytest.raises(PaymentSessionFailed):
            checkout_service.checkout(user.id, user.email, _cart((product.id, 1)))

        order = Order.objects.get()
        assert order.payment_session_id is None
        assert order.payment_status == PaymentStatus.UNPAID

    def test_ledger_failure_becomes_order_creation_failed(
        self, fake_gateway, user, make_product
    ):
        class BrokenOrders(OrderDjangoRepository):
            def create(self, **kwargs):
                raise DatabaseError("disk full")

        repo = BrokenOrders()
        order_service = OrderService(
            repo, StockReconciler(repo, ProductDjangoRepository())
        )
        service = CheckoutService(
            ProductDjangoRepository(),
            order_service,
            fake_gateway,
            Decimal("5.00"),
            "http://shop.test",
        )
        product = make_product()
        with pytest.raises(OrderCreationFailed):
            service.checkout(user.id, user.email, _cart((product.id, 1)))
        assert fake_gateway.sessions == []


# ---------------------------------------------------------------------------
# Order Ledger
# ---------------------------------------------------------------------------


class TestCreateOrder:
    def _line(self, product) -> OrderLineDTO:
        return OrderLineDTO(
            product_id=product.id,
            product_name=product.name,
            quantity=1,
            unit_price=product.price,
        )

    def test_returns_new_order_id(self, order_service, user, make_product):
        product = make_product()
        order_id = order_service.create_order(
            user.id, [self._line(product)], " Tokyo ", Decimal("15.00")
        )
        order = Order.objects.get(pk=order_id)
        assert order.shipping_address == "Tokyo"

    def test_publishes_order_placed_on_commit(
        self,
        order_service,
        user,
        make_product,
        captured_events,
        django_capture_on_commit_callbacks,
    ):
        product = make_product()
        with django_capture_on_commit_callbacks(execute=True):
            order_id = order_service.create_order(
                user.id, [self._line(product)], "Tokyo", Decimal("15.00")
            )
        assert len(captured_events) == 1
        assert isinstance(captured_events[0], OrderPlaced)
        assert captured_events[0].aggregate_id == order_id

    @pytest.mark.parametrize(
        ("lines", "address", "total", "message"),
        [
            (False, "Tokyo", Decimal("1.00"), "No products selected."),
            (True, "  ", Decimal("1.00"), "Shipping address is required."),
            (True, "Tokyo", Decimal("0.00"), "Order total must be greater than zero."),
        ],
    )
    def test_invalid_input(
        self, order_service, user, make_product, lines, address, total, message
    ):
        line_list = [self._line(make_product())] if lines else []
        with pytest.raises(InvalidOrder, match=message):
            order_service.create_order(user.id, line_list, address, total)
        assert Order.objects.count() == 0


class TestUpdateOrder:
    def test_first_payment_reconciles_stock(self, order_service, user, make_product):
        product = make_product(stock=10)
        order = _order_with_lines(user, (product, 2))

        assert order_service.update_order(user.id, order.id, PAID) == 1

        product.refresh_from_db()
        assert product.stock == 8
        assert product.sales_count == 2

    def test_duplicate_payment_is_a_no_op(self, order_service, user, make_product):
        product = make_product(stock=10)
        order = _order_with_lines(user, (product, 2))

        order_service.update_order(user.id, order.id, PAID)
        assert order_service.update_order(user.id, order.id, PAID) == 0

        product.refresh_from_db()
        assert product.stock == 8
        assert product.sales_count == 2

    def test_other_users_order_is_untouched(
        self, order_service, user, other_user, make_product
    ):
        product = make_product(stock=10)
        order = _order_with_lines(user, (product, 2))

        assert order_service.update_order(other_user.id, order.id, PAID) == 0

        order.refresh_from_db()
        product.refresh_from_db()
        assert order.payment_status == PaymentStatus.UNPAID
        assert product.stock == 10

    def test_empty_update_returns_zero(self, order_service, user, make_product):
        order = _order_with_lines(user, (make_product(), 1))
        assert order_service.update_order(user.id, order.id, OrderUpdateDTO()) == 0

    def test_status_only_update_does_not_reconcile(
        self, order_service, user, make_product
    ):
        product = make_product(stock=10)
        order = _order_with_lines(user, (product, 2))
        shipped = OrderUpdateDTO(status=OrderStatus.SHIPPED)

        assert order_service.update_order(user.id, order.id, shipped) == 1

        product.refresh_from_db()
        assert product.stock == 10

    def test_publishes_order_paid_once(
        self,
        order_service,
        user,
        make_product,
        captured_events,
        django_capture_on_commit_callbacks,
    ):
        order = _order_with_lines(user, (make_product(), 1), (make_product(), 1))
        with django_capture_on_commit_callbacks(execute=True):
            order_service.update_order(user.id, order.id, PAID)
            order_service.update_order(user.id, order.id, PAID)

        assert len(captured_events) == 1
        assert isinstance(captured_events[0], OrderPaid)
        assert captured_events[0].lines_reconciled == 2


# ---------------------------------------------------------------------------
# Stock Reconciler
# ---------------------------------------------------------------------------


class TestStockReconciler:
    @pytest.fixture()
    def reconciler(self):
        return StockReconciler(OrderDjangoRepository(), ProductDjangoRepository())

    def test_reconciles_every_line(self, reconciler, user, make_product):
        a, b = make_product(stock=5), make_product(stock=5)
        order = _order_with_lines(user, (a, 2), (b, 5))

        assert reconciler.reconcile(order.id) == 2

        a.refresh_from_db()
        b.refresh_from_db()
        assert (a.stock, a.sales_count) == (3, 2)
        assert (b.stock, b.sales_count) == (0, 5)

    def test_failing_line_does_not_undo_the_others(
        self, reconciler, user, make_product
    ):
        first = make_product(stock=5)
        oversold = make_product(stock=1)
        last = make_product(stock=5)
        order = _order_with_lines(user, (first, 2), (oversold, 3), (last, 1))

        assert reconciler.reconcile(order.id) == 2

        for product in (first, oversold, last):
            product.refresh_from_db()
        assert (first.stock, first.sales_count) == (3, 2)
        assert (oversold.stock, oversold.sales_count) == (1, 0)
        assert (last.stock, last.sales_count) == (4, 1)

    def test_payment_still_recorded_when_a_line_fails(
        self, order_service, user, make_product
    ):
        oversold = make_product(stock=0)
        order = _order_with_lines(user, (oversold, 1))

        assert order_service.update_order(user.id, order.id, PAID) == 1

        order.refresh_from_db()
        assert order.payment_status == PaymentStatus.PAYMENT_SUCCESS

    def test_order_without_lines(self, reconciler, user):
        order = _order_with_lines(user)
        assert reconciler.reconcile(order.id) == 0


# ---------------------------------------------------------------------------
# Payment Confirmation Handler
# ---------------------------------------------------------------------------


class TestPaymentWebhookService:
    @pytest.fixture()
    def webhook_service(self, fake_gateway, order_service):
        return PaymentWebhookService(fake_gateway, order_service)

    def _event(self, metadata, event_type="checkout.session.completed"):
        return PaymentEvent(type=event_type, session_id="cs_test_1", metadata=metadata)

    def test_invalid_signature_propagates(self, webhook_service, fake_gateway):
        fake_gateway.event = self._event({})
        with pytest.raises(InvalidSignature):
            webhook_service.handle(b"{}", "forged")

    def test_completed_session_marks_order_paid(
        self, webhook_service, fake_gateway, user, make_product
    ):
        product = make_product(stock=4)
        order = _order_with_lines(user, (product, 1))
        fake_gateway.event = self._event(
            {"order_id": str(order.id), "user_id": str(user.id)}
        )

        assert webhook_service.handle(b"{}", "valid") == 1
        assert webhook_service.handle(b"{}", "valid") == 0

        order.refresh_from_db()
        product.refresh_from_db()
        assert order.status == OrderStatus.COMPLETED
        assert order.payment_status == PaymentStatus.PAYMENT_SUCCESS
        assert product.stock == 3

    def test_other_event_types_are_ignored(
        self, webhook_service, fake_gateway, user, make_product
    ):
        order = _order_with_lines(user, (make_product(), 1))
        fake_gateway.event = self._event(
            {"order_id": str(order.id), "user_id": str(user.id)},
            event_type="payment_intent.succeeded",
        )

        assert webhook_service.handle(b"{}", "valid") == 0
        order.refresh_from_db()
        assert order.payment_status == PaymentStatus.UNPAID

    @pytest.mark.parametrize(
        "metadata",
        [{}, {"order_id": "1"}, {"user_id": "1"}, {"order_id": "x", "user_id": "1"}],
    )
    def test_unusable_metadata(self, webhook_service, fake_gateway, metadata):
        fake_gateway.event = self._event(metadata)
        with pytest.raises(MissingOrderMetadata):
            webhook_service.handle(b"{}", "valid")
