"""Product catalog service (Use Cases).

Owns product records and exposes administrative stock adjustment.
Persistence goes through the injected ``IProductRepository``; stock
writes go through ``StockAdjuster`` inside a ``UnitOfWork``.

Rules enforced here:
- Price is a non-negative decimal (validated by the DTOs).
- Partial updates keep every field that was not supplied.
- Stock cannot be set directly; ``adjust_stock`` applies a signed delta
  and refuses to push stock below zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import transaction

from modules.core.locking import UnitOfWork
from modules.products.dtos import StockLevel
from modules.products.exceptions import ProductNotFound
from modules.products.models import Product
from modules.products.stock import StockAdjuster

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = ("name", "description", "price", "category", "image_url")


class ProductCatalog:
    """Application service for product use-cases.

    Receives an ``IProductRepository`` (and optionally a ``UnitOfWork``)
    via constructor injection.
    """

    def __init__(
        self,
        repository: IProductRepository,
        unit_of_work: Optional[UnitOfWork] = None,
    ) -> None:
        self._repo = repository
        self._uow = unit_of_work or UnitOfWork()
        self._stock = StockAdjuster(repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        product = Product(
            name=dto.name,
            description=dto.description,
            price=dto.price,
            stock=dto.stock,
            category=dto.category,
            image_url=dto.image_url,
        )
        product = self._repo.save(product)
        logger.info("product.created", product_id=str(product.id), stock=product.stock)
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Apply the supplied fields to an existing product.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._get_or_raise(id)

        changed = []
        for field in UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)
                changed.append(field)

        product = self._repo.save(product)
        logger.info("product.updated", product_id=str(id), fields=changed)
        return product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        """Retire a product.  Existing line items keep referencing it.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        if not self._repo.retire(id):
            raise ProductNotFound(f"Product not found: {id}", product_id=id)
        logger.info("product.deleted", product_id=str(id))

    def adjust_stock(self, id: str, delta: int) -> StockLevel:
        """Atomically add *delta* (may be negative) to a product's stock.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductOutOfStock: if the result would be negative.
        """
        with self._uow.atomic(products=[id]):
            new_stock = self._stock.adjust(id, delta)
        return StockLevel(id=str(id), stock=new_stock)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: str) -> Product:
        return self._get_or_raise(id)

    def list_products(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> QuerySet[Product]:
        """Return live products, newest first, optionally filtered."""
        return self._repo.list(filters)

    def _get_or_raise(self, id: str) -> Product:
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product not found: {id}", product_id=str(id))
        return product
