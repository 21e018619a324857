"""Integration test for the ``seed_data`` management command."""

from __future__ import annotations

from io import StringIO

import pytest
from django.core.management import call_command

from modules.orders.models import Order
from modules.products.models import Product
from modules.users.models import User, UserRole

pytestmark = pytest.mark.integration


def test_seed_creates_users_products_and_orders():
    out = StringIO()

    call_command("seed_data", "--users=3", "--products=8", "--orders=4", stdout=out)

    assert User.objects.count() == 3
    assert User.objects.filter(role=UserRole.ADMIN).count() == 1
    assert Product.objects.count() == 8
    assert set(Product.objects.values_list("category", flat=True)) == {
        "electronics",
        "clothing",
    }
    assert 0 < Order.objects.count() <= 4
    assert all(product.stock >= 0 for product in Product.objects.all())
    assert "Seed completed" in out.getvalue()


def test_seed_is_rerunnable_for_users():
    call_command("seed_data", "--users=2", "--products=1", "--orders=0", stdout=StringIO())
    call_command("seed_data", "--users=2", "--products=1", "--orders=0", stdout=StringIO())
    assert User.objects.count() == 2
