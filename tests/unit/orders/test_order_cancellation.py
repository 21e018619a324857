"""Unit tests for ``OrderStatusMachine.cancel``.

Covers:
- Stock restored line by line, order and items retired, history kept.
- Cancel from every non-delivered status.
- Delivered orders rejected with nothing changed.
- Cancelling twice reports the order as gone.
"""

from __future__ import annotations

import uuid

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import CannotCancelDelivered, OrderNotFound
from modules.orders.models import Order, OrderItem, OrderStatusHistory

pytestmark = pytest.mark.unit


@pytest.fixture()
def product_a(make_product):
    return make_product(name="A", price="10.00", stock=100)


@pytest.fixture()
def product_b(make_product):
    return make_product(name="B", price="25.50", stock=50)


@pytest.fixture()
def order(ledger, user, product_a, product_b):
    return ledger.create_order(
        CreateOrderDTO(
            user_id=str(user.id),
            items=[
                CreateOrderItemDTO(product_id=str(product_a.id), quantity=5),
                CreateOrderItemDTO(product_id=str(product_b.id), quantity=3),
            ],
        )
    )


class TestCancel:
    def test_stock_restored_to_original(self, machine, order, product_a, product_b):
        product_a.refresh_from_db()
        product_b.refresh_from_db()
        assert (product_a.stock, product_b.stock) == (95, 47)

        machine.cancel(str(order.id))

        product_a.refresh_from_db()
        product_b.refresh_from_db()
        assert (product_a.stock, product_b.stock) == (100, 50)

    def test_returns_cancelled_order(self, machine, order):
        cancelled = machine.cancel(str(order.id))
        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.is_retired

    def test_order_and_items_retired(self, machine, ledger, order):
        machine.cancel(str(order.id))

        with pytest.raises(OrderNotFound):
            ledger.get_order(str(order.id))
        assert ledger.list_orders() == []
        assert Order.objects.filter(id=order.id).exists()
        assert OrderItem.objects.alive().filter(order_id=order.id).count() == 0

    def test_history_recorded(self, machine, order):
        machine.cancel(str(order.id), notes="Customer changed mind")

        record = OrderStatusHistory.objects.get(
            order_id=order.id, new_status=OrderStatus.CANCELLED
        )
        assert record.old_status == OrderStatus.PENDING
        assert record.notes == "Customer changed mind"

    def test_default_note(self, machine, order):
        machine.cancel(str(order.id))
        record = OrderStatusHistory.objects.get(
            order_id=order.id, new_status=OrderStatus.CANCELLED
        )
        assert record.notes == "Order cancelled"

    @pytest.mark.parametrize("status", ["processing", "shipped"])
    def test_cancel_from_later_states(self, machine, order, product_a, status):
        machine.transition(str(order.id), status)
        machine.cancel(str(order.id))
        product_a.refresh_from_db()
        assert product_a.stock == 100

    def test_transition_to_cancelled_restores_stock(self, machine, order, product_b):
        machine.transition(str(order.id), "cancelled")
        product_b.refresh_from_db()
        assert product_b.stock == 50

    def test_cancel_twice(self, machine, order, product_a):
        machine.cancel(str(order.id))
        with pytest.raises(OrderNotFound):
            machine.cancel(str(order.id))
        product_a.refresh_from_db()
        assert product_a.stock == 100

    def test_unknown_order(self, machine):
        with pytest.raises(OrderNotFound):
            machine.cancel(str(uuid.uuid4()))

    def test_retired_product_skipped(self, machine, order, product_a, product_b):
        product_a.retire()

        machine.cancel(str(order.id))

        product_a.refresh_from_db()
        product_b.refresh_from_db()
        assert product_a.stock == 95
        assert product_b.stock == 50


class TestCancelDelivered:
    def test_rejected(self, machine, order):
        machine.transition(str(order.id), "delivered")
        with pytest.raises(CannotCancelDelivered) as exc_info:
            machine.cancel(str(order.id))
        assert exc_info.value.message == "Cannot cancel delivered order."

    def test_nothing_changes(self, machine, ledger, order, product_a, product_b):
        machine.transition(str(order.id), "delivered")

        with pytest.raises(CannotCancelDelivered):
            machine.cancel(str(order.id))

        product_a.refresh_from_db()
        product_b.refresh_from_db()
        assert (product_a.stock, product_b.stock) == (95, 47)
        assert ledger.get_order(str(order.id)).status == OrderStatus.DELIVERED
