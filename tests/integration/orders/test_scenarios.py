"""End-to-end engine scenarios, driven through the services."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import (
    CannotCancelDelivered,
    InsufficientStock,
    MissingFields,
    OrderNotFound,
)

pytestmark = pytest.mark.integration


def _order(user, product, quantity):
    return CreateOrderDTO(
        user_id=str(user.id),
        items=[CreateOrderItemDTO(product_id=str(product.id), quantity=quantity)],
    )


def test_order_decrements_stock_and_prices_total(ledger, user, make_product):
    product = make_product(price="4.25", stock=10)

    order = ledger.create_order(_order(user, product, 3))

    product.refresh_from_db()
    assert product.stock == 7
    assert order.total == Decimal("3") * Decimal("4.25")


def test_cancel_restores_stock_and_hides_order(ledger, machine, user, make_product):
    product = make_product(stock=5)
    order = ledger.create_order(_order(user, product, 5))
    product.refresh_from_db()
    assert product.stock == 0

    machine.cancel(str(order.id))

    product.refresh_from_db()
    assert product.stock == 5
    with pytest.raises(OrderNotFound):
        ledger.get_order(str(order.id))


def test_delivered_order_cannot_be_cancelled(ledger, machine, user, make_product):
    order = ledger.create_order(_order(user, make_product(), 1))
    for status in ("processing", "shipped", "delivered"):
        machine.transition(str(order.id), status)

    with pytest.raises(CannotCancelDelivered):
        machine.cancel(str(order.id))


def test_empty_cart_is_missing_fields(ledger, user):
    with pytest.raises(MissingFields):
        ledger.create_order(CreateOrderDTO(user_id=str(user.id), items=[]))


def test_oversized_order_keeps_stock(ledger, user, make_product):
    product = make_product(stock=2)

    with pytest.raises(InsufficientStock):
        ledger.create_order(_order(user, product, 5))

    product.refresh_from_db()
    assert product.stock == 2
