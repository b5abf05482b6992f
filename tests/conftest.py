from __future__ import annotations

import itertools
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService, StockReconciler
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from payment_doubles import FakePaymentGateway


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def user():
    return get_user_model().objects.create_user(
        username="buyer",
        email="buyer@example.com",
        password="testpass123",
    )


@pytest.fixture()
def other_user():
    return get_user_model().objects.create_user(
        username="other",
        email="other@example.com",
        password="testpass123",
    )


@pytest.fixture()
def staff_user():
    return get_user_model().objects.create_user(
        username="staff",
        email="staff@example.com",
        password="testpass123",
        is_staff=True,
    )


@pytest.fixture()
def auth_client(user):
    """APIClient with a force-authenticated buyer."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product():
    counter = itertools.count(1)

    def _make(**overrides) -> Product:
        n = next(counter)
        fields = {
            "name": f"Product {n}",
            "description": f"Description {n}",
            "price": Decimal("10.00"),
            "stock": 10,
        }
        fields.update(overrides)
        return Product.objects.create(**fields)

    return _make


# ---------------------------------------------------------------------------
# Orders / payments
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    order_repository = OrderDjangoRepository()
    return OrderService(
        order_repository=order_repository,
        stock_reconciler=StockReconciler(
            order_repository=order_repository,
            product_repository=ProductDjangoRepository(),
        ),
    )


@pytest.fixture()
def fake_gateway():
    return FakePaymentGateway()
