"""Unit tests for ``OrderLedger.create_order`` and the order queries.

Covers:
- Commit: stock decremented, price snapshotted, total frozen, history.
- Validation order: missing fields, unknown user, unknown product,
  insufficient stock (accumulated per product).
- All-or-nothing: a failing line leaves every counter untouched.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import (
    InvalidStatus,
    MissingFields,
    OrderNotFound,
    ProductNotFound,
    ProductOutOfStock,
    UserNotFound,
)
from modules.orders.models import Order, OrderItem, OrderStatusHistory

pytestmark = pytest.mark.unit


def _dto(user, *lines, address=""):
    return CreateOrderDTO(
        user_id=str(user.id) if user is not None else None,
        items=[
            CreateOrderItemDTO(product_id=str(product_id), quantity=quantity)
            for product_id, quantity in lines
        ],
        shipping_address=address,
    )


class TestCreateOrder:
    def test_single_line(self, ledger, user, make_product):
        product = make_product(price="19.99", stock=10)

        order = ledger.create_order(_dto(user, (product.id, 3)))

        assert order.status == OrderStatus.PENDING
        assert order.total == Decimal("59.97")
        items = list(order.items.all())
        assert len(items) == 1
        assert items[0].quantity == 3
        assert items[0].price == Decimal("19.99")
        product.refresh_from_db()
        assert product.stock == 7

    def test_multi_line_total(self, ledger, user, make_product):
        a = make_product(name="A", price="10.00", stock=5)
        b = make_product(name="B", price="2.50", stock=5)

        order = ledger.create_order(_dto(user, (a.id, 2), (b.id, 4)))

        assert order.total == Decimal("30.00")
        a.refresh_from_db()
        b.refresh_from_db()
        assert (a.stock, b.stock) == (3, 1)

    def test_shipping_address_stored(self, ledger, user, make_product):
        product = make_product()
        order = ledger.create_order(
            _dto(user, (product.id, 1), address="1 Main St")
        )
        assert order.shipping_address == "1 Main St"

    def test_initial_history_recorded(self, ledger, user, make_product):
        product = make_product()
        order = ledger.create_order(_dto(user, (product.id, 1)))

        history = list(OrderStatusHistory.objects.filter(order=order))
        assert len(history) == 1
        assert history[0].old_status is None
        assert history[0].new_status == OrderStatus.PENDING
        assert history[0].notes == "Order created"

    def test_price_snapshot_survives_catalog_change(
        self, ledger, user, make_product
    ):
        product = make_product(price="10.00", stock=5)
        order = ledger.create_order(_dto(user, (product.id, 2)))

        product.price = Decimal("99.00")
        product.save()

        fetched = ledger.get_order(str(order.id))
        assert fetched.total == Decimal("20.00")
        assert list(fetched.items.all())[0].price == Decimal("10.00")

    def test_duplicate_product_lines_accumulate(self, ledger, user, make_product):
        product = make_product(stock=5)
        order = ledger.create_order(_dto(user, (product.id, 2), (product.id, 3)))

        assert order.items.count() == 2
        product.refresh_from_db()
        assert product.stock == 0

    def test_uppercase_product_id_resolves(self, ledger, user, make_product):
        product = make_product(stock=2)
        ledger.create_order(_dto(user, (str(product.id).upper(), 1)))
        product.refresh_from_db()
        assert product.stock == 1


class TestCreateOrderValidation:
    def test_missing_user(self, ledger, make_product):
        product = make_product()
        with pytest.raises(MissingFields):
            ledger.create_order(_dto(None, (product.id, 1)))

    def test_empty_items(self, ledger, user):
        with pytest.raises(MissingFields):
            ledger.create_order(CreateOrderDTO(user_id=str(user.id), items=[]))

    def test_absent_items(self, ledger, user):
        with pytest.raises(MissingFields):
            ledger.create_order(CreateOrderDTO(user_id=str(user.id)))

    def test_unknown_user(self, ledger, make_product):
        product = make_product(stock=3)
        dto = CreateOrderDTO(
            user_id=str(uuid.uuid4()),
            items=[CreateOrderItemDTO(product_id=str(product.id), quantity=1)],
        )
        with pytest.raises(UserNotFound):
            ledger.create_order(dto)
        product.refresh_from_db()
        assert product.stock == 3

    def test_unknown_product_named(self, ledger, user, make_product):
        missing = str(uuid.uuid4())
        product = make_product(stock=3)

        with pytest.raises(ProductNotFound) as exc_info:
            ledger.create_order(_dto(user, (product.id, 1), (missing, 1)))

        assert missing in exc_info.value.message
        product.refresh_from_db()
        assert product.stock == 3
        assert Order.objects.count() == 0

    def test_retired_product_not_orderable(self, ledger, user, make_product):
        product = make_product(stock=3)
        product.retire()
        with pytest.raises(ProductNotFound):
            ledger.create_order(_dto(user, (product.id, 1)))

    def test_insufficient_stock(self, ledger, user, make_product):
        product = make_product(name="Lamp", stock=2)

        with pytest.raises(ProductOutOfStock) as exc_info:
            ledger.create_order(_dto(user, (product.id, 5)))

        assert exc_info.value.message == "Insufficient stock for product: Lamp"
        product.refresh_from_db()
        assert product.stock == 2

    def test_accumulated_demand_checked(self, ledger, user, make_product):
        product = make_product(stock=4)
        with pytest.raises(ProductOutOfStock) as exc_info:
            ledger.create_order(_dto(user, (product.id, 3), (product.id, 2)))
        assert exc_info.value.context["requested"] == 5
        product.refresh_from_db()
        assert product.stock == 4

    def test_failing_second_line_leaves_first_untouched(
        self, ledger, user, make_product
    ):
        plenty = make_product(name="Plenty", stock=10)
        scarce = make_product(name="Scarce", stock=1)

        with pytest.raises(ProductOutOfStock):
            ledger.create_order(_dto(user, (plenty.id, 2), (scarce.id, 2)))

        plenty.refresh_from_db()
        scarce.refresh_from_db()
        assert (plenty.stock, scarce.stock) == (10, 1)
        assert Order.objects.count() == 0
        assert OrderItem.objects.count() == 0


class TestQueries:
    def test_get_unknown_order(self, ledger):
        with pytest.raises(OrderNotFound):
            ledger.get_order(str(uuid.uuid4()))

    def test_get_malformed_id(self, ledger):
        with pytest.raises(OrderNotFound):
            ledger.get_order("nope")

    def test_list_filters_by_user_and_status(
        self, ledger, machine, user, make_product
    ):
        from modules.users.models import User

        other = User.objects.create(email="other@example.com", name="Other")
        product = make_product(stock=10)
        mine = ledger.create_order(_dto(user, (product.id, 1)))
        shipped = ledger.create_order(_dto(user, (product.id, 1)))
        machine.transition(str(shipped.id), OrderStatus.SHIPPED)
        theirs = ledger.create_order(_dto(other, (product.id, 1)))

        assert [o.id for o in ledger.list_orders()] == [theirs.id, shipped.id, mine.id]
        assert [o.id for o in ledger.list_orders(user_id=str(user.id))] == [
            shipped.id,
            mine.id,
        ]
        assert [
            o.id for o in ledger.list_orders(user_id=str(user.id), status="pending")
        ] == [mine.id]

    def test_list_rejects_unknown_status(self, ledger):
        with pytest.raises(InvalidStatus):
            ledger.list_orders(status="lost")

    def test_list_malformed_user_is_empty(self, ledger):
        assert ledger.list_orders(user_id="not-a-uuid") == []
