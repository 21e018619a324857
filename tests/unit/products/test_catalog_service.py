"""Unit tests for ``ProductCatalog``."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.exceptions import ProductNotFound, ProductOutOfStock
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductCatalog

pytestmark = pytest.mark.unit


@pytest.fixture()
def catalog(unit_of_work):
    return ProductCatalog(ProductDjangoRepository(), unit_of_work=unit_of_work)


class TestCreateProduct:
    def test_creates_with_defaults(self, catalog):
        product = catalog.create_product(
            CreateProductDTO(name="Desk", price=Decimal("150.00"))
        )
        assert product.stock == 0
        assert product.category == ""
        assert Product.objects.filter(id=product.id).exists()

    def test_creates_with_stock(self, catalog):
        product = catalog.create_product(
            CreateProductDTO(name="Desk", price=Decimal("150.00"), stock=7)
        )
        assert product.stock == 7


class TestUpdateProduct:
    def test_partial_update_keeps_other_fields(self, catalog, make_product):
        product = make_product(name="Old", price="5.00", stock=3, category="books")

        updated = catalog.update_product(
            str(product.id), UpdateProductDTO(price=Decimal("7.50"))
        )

        assert updated.price == Decimal("7.50")
        assert updated.name == "Old"
        assert updated.category == "books"
        assert updated.stock == 3

    def test_unknown_product(self, catalog):
        with pytest.raises(ProductNotFound):
            catalog.update_product("missing", UpdateProductDTO(name="x"))


class TestDeleteProduct:
    def test_delete_retires(self, catalog, make_product):
        product = make_product()
        catalog.delete_product(str(product.id))
        with pytest.raises(ProductNotFound):
            catalog.get_product(str(product.id))
        assert Product.objects.filter(id=product.id).exists()

    def test_delete_twice(self, catalog, make_product):
        product = make_product()
        catalog.delete_product(str(product.id))
        with pytest.raises(ProductNotFound):
            catalog.delete_product(str(product.id))


class TestAdjustStock:
    def test_returns_stock_level(self, catalog, make_product):
        product = make_product(stock=4)
        level = catalog.adjust_stock(str(product.id), 6)
        assert level.id == str(product.id)
        assert level.stock == 10

    def test_negative_result_rejected(self, catalog, make_product):
        product = make_product(stock=4)
        with pytest.raises(ProductOutOfStock):
            catalog.adjust_stock(str(product.id), -5)
        product.refresh_from_db()
        assert product.stock == 4


class TestListProducts:
    def test_filters(self, catalog, make_product):
        make_product(name="Cheap book", price="5.00", category="books")
        make_product(name="Pricey book", price="50.00", category="books")
        make_product(name="Lamp", price="20.00", category="home")

        books = catalog.list_products({"category": "books"})
        assert {p.name for p in books} == {"Cheap book", "Pricey book"}

        mid = catalog.list_products(
            {"price__gte": Decimal("10"), "price__lte": Decimal("30")}
        )
        assert [p.name for p in mid] == ["Lamp"]

    def test_newest_first_and_retired_hidden(self, catalog, make_product):
        first = make_product(name="First")
        second = make_product(name="Second")
        make_product(name="Gone").retire()

        assert [p.id for p in catalog.list_products()] == [second.id, first.id]
