from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from modules.core.locking import KeyedLockRegistry, UnitOfWork
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderLedger
from modules.orders.state_machine import OrderStatusMachine
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.users.models import User
from modules.users.repositories.django_repository import UserDjangoRepository


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


@pytest.fixture()
def user():
    return User.objects.create(
        email="buyer@example.com", name="Buyer", password="not-a-real-hash"
    )


@pytest.fixture()
def make_product():
    def _make(name="Widget", price="10.00", stock=10, category="home"):
        return Product.objects.create(
            name=name, price=Decimal(price), stock=stock, category=category
        )

    return _make


@pytest.fixture()
def unit_of_work():
    """A unit of work with its own lock registry and a short timeout."""
    return UnitOfWork(locks=KeyedLockRegistry(), timeout=2.0)


@pytest.fixture()
def ledger(unit_of_work):
    return OrderLedger(
        order_repository=OrderDjangoRepository(),
        user_repository=UserDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        unit_of_work=unit_of_work,
    )


@pytest.fixture()
def machine(unit_of_work):
    return OrderStatusMachine(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        unit_of_work=unit_of_work,
    )
