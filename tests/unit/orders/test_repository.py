"""Unit tests for OrderDjangoRepository: atomic creation and the payment guard."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.dtos import OrderLineDTO, OrderUpdateDTO
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit

PAID = OrderUpdateDTO(
    status=OrderStatus.COMPLETED, payment_status=PaymentStatus.PAYMENT_SUCCESS
)


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


@pytest.fixture()
def order(repo, user, make_product):
    product = make_product(name="Mug", price=Decimal("19.99"))
    return repo.create(
        user_id=user.id,
        lines=[
            OrderLineDTO(
                product_id=product.id,
                product_name="Mug",
                quantity=2,
                unit_price=Decimal("19.99"),
            )
        ],
        shipping_address="Tokyo",
        total_amount=Decimal("44.98"),
    )


class TestCreate:
    def test_creates_order_and_lines(self, order, user):
        assert order.user_id == user.id
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.UNPAID
        items = list(order.items.all())
        assert len(items) == 1
        assert items[0].product_name == "Mug"
        assert items[0].unit_price == Decimal("19.99")

    def test_get_lines_in_insertion_order(self, repo, user, make_product):
        a, b = make_product(name="A"), make_product(name="B")
        order = repo.create(
            user_id=user.id,
            lines=[
                OrderLineDTO(
                    product_id=b.id, product_name="B", quantity=1, unit_price=1
                ),
                OrderLineDTO(
                    product_id=a.id, product_name="A", quantity=1, unit_price=1
                ),
            ],
            shipping_address="Tokyo",
            total_amount=Decimal("7.00"),
        )
        assert [line.product_name for line in repo.get_lines(order.id)] == ["B", "A"]

    def test_list_for_user_newest_first(self, repo, order, user, other_user):
        newer = Order.objects.create(
            user=user, total_amount=Decimal("1.00"), shipping_address="Kyoto"
        )
        Order.objects.create(
            user=other_user, total_amount=Decimal("1.00"), shipping_address="Nara"
        )
        assert list(repo.list_for_user(user.id)) == [newer, order]


class TestAttachPaymentSession:
    def test_links_session_to_owned_order(self, repo, order, user):
        assert repo.attach_payment_session(order.id, user.id, "cs_test_1") == 1
        order.refresh_from_db()
        assert order.payment_session_id == "cs_test_1"

    def test_ignores_other_users_order(self, repo, order, other_user):
        assert repo.attach_payment_session(order.id, other_user.id, "cs_x") == 0
        order.refresh_from_db()
        assert order.payment_session_id is None


class TestUpdateUnlessPaid:
    def test_first_payment_update_affects_one_row(self, repo, order, user):
        assert repo.update_unless_paid(order.id, user.id, PAID) == 1
        order.refresh_from_db()
        assert order.status == OrderStatus.COMPLETED
        assert order.payment_status == PaymentStatus.PAYMENT_SUCCESS

    def test_paid_order_is_never_touched_again(self, repo, order, user):
        repo.update_unless_paid(order.id, user.id, PAID)
        refund = OrderUpdateDTO(
            status=OrderStatus.REFUNDED, payment_status=PaymentStatus.REFUNDED
        )
        assert repo.update_unless_paid(order.id, user.id, PAID) == 0
        assert repo.update_unless_paid(order.id, user.id, refund) == 0
        order.refresh_from_db()
        assert order.status == OrderStatus.COMPLETED
        assert order.payment_status == PaymentStatus.PAYMENT_SUCCESS

    def test_wrong_owner_affects_nothing(self, repo, order, other_user):
        assert repo.update_unless_paid(order.id, other_user.id, PAID) == 0
        order.refresh_from_db()
        assert order.payment_status == PaymentStatus.UNPAID

    def test_unknown_order_affects_nothing(self, repo, user):
        assert repo.update_unless_paid(999_999, user.id, PAID) == 0

    def test_empty_update_affects_nothing(self, repo, order, user):
        assert repo.update_unless_paid(order.id, user.id, OrderUpdateDTO()) == 0

    def test_non_final_updates_are_allowed_repeatedly(self, repo, order, user):
        processing = OrderUpdateDTO(payment_status=PaymentStatus.PAYMENT_PROCESSING)
        assert repo.update_unless_paid(order.id, user.id, processing) == 1
        assert repo.update_unless_paid(order.id, user.id, processing) == 1

    def test_does_not_touch_other_orders(self, repo, order, user):
        other = Order.objects.create(
            user=user, total_amount=Decimal("1.00"), shipping_address="Kyoto"
        )
        repo.update_unless_paid(order.id, user.id, PAID)
        other.refresh_from_db()
        assert other.payment_status == PaymentStatus.UNPAID
        assert OrderItem.objects.filter(order=other).count() == 0


class TestWritePaths:
    def test_repository_has_no_unguarded_save(self, repo):
        assert not hasattr(repo, "save")
        assert not hasattr(repo, "get_by_id")

    def test_paid_order_keeps_its_state_after_later_updates(self, repo, order, user):
        repo.update_unless_paid(order.id, user.id, PAID)
        repo.update_unless_paid(
            order.id, user.id, OrderUpdateDTO(status=OrderStatus.PENDING)
        )
        repo.attach_payment_session(order.id, user.id, "cs_test_late")

        order.refresh_from_db()
        assert order.status == OrderStatus.COMPLETED
        assert order.payment_status == PaymentStatus.PAYMENT_SUCCESS
