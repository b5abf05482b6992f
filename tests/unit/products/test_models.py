"""Unit tests for the Product model."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F

from modules.products.models import Product

pytestmark = pytest.mark.unit


class TestProductModel:
    def test_defaults(self):
        product = Product.objects.create(name="Mug", price=Decimal("12.00"))
        assert product.stock == 0
        assert product.sales_count == 0
        assert product.is_featured is False
        assert product.description == ""

    def test_str(self):
        product = Product.objects.create(name="Mug", price=Decimal("12.00"))
        assert str(product) == f"#{product.id} Mug"

    def test_price_must_be_positive_in_db(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            Product.objects.create(name="Free", price=Decimal("0.00"))

    def test_stock_cannot_go_negative_in_db(self):
        product = Product.objects.create(name="Mug", price=Decimal("1.00"), stock=1)
        with pytest.raises(IntegrityError), transaction.atomic():
            Product.objects.filter(pk=product.pk).update(stock=F("stock") - 2)

    def test_clean_rejects_blank_name(self):
        product = Product(name="   ", price=Decimal("1.00"))
        with pytest.raises(ValidationError):
            product.clean()

    def test_default_ordering_is_newest_first(self):
        first = Product.objects.create(name="First", price=Decimal("1.00"))
        second = Product.objects.create(name="Second", price=Decimal("1.00"))
        assert list(Product.objects.all()) == [second, first]
