"""Atomic stock adjustment shared by every stock mutation.

``StockAdjuster.adjust`` is the only code path that writes
``Product.stock``: manual restocks (``ProductCatalog.adjust_stock``),
order commits (``OrderLedger.create_order``) and cancellations
(``OrderStatusMachine.cancel``) all go through it.

The caller owns the ``UnitOfWork`` covering the product; ``adjust`` does
not open one itself, so a multi-item order stays a single transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modules.core.exceptions import InvalidArgument
from modules.products.exceptions import ProductNotFound, ProductOutOfStock
from modules.products.models import MAX_STOCK

if TYPE_CHECKING:
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class StockAdjuster:
    def __init__(self, product_repository: IProductRepository) -> None:
        self._product_repo = product_repository

    def adjust(self, product_id: str, delta: int) -> int:
        """Apply *delta* to the product's stock and return the new value.

        Raises:
            ProductNotFound: the product does not exist or is retired.
            ProductOutOfStock: the result would be negative; stock unchanged.
            InvalidArgument: the result would exceed ``MAX_STOCK``.
        """
        product = self._product_repo.get_for_update(str(product_id))
        if not product:
            raise ProductNotFound(
                f"Product not found: {product_id}", product_id=str(product_id)
            )

        log = logger.bind(product_id=str(product.id), delta=delta)

        if product.stock + delta < 0:
            log.warning("stock.insufficient", available=product.stock)
            raise ProductOutOfStock.for_product(
                product.id, product.name, requested=-delta, available=product.stock
            )

        if product.stock + delta > MAX_STOCK:
            log.warning("stock.overflow", available=product.stock)
            raise InvalidArgument(
                f"Stock cannot exceed {MAX_STOCK}.", product_id=str(product.id)
            )

        new_stock = self._product_repo.apply_stock_delta(str(product.id), delta)
        if new_stock is None:
            # Guard rejected the write: another writer got there first.
            log.warning("stock.guard_rejected", seen=product.stock)
            raise ProductOutOfStock.for_product(
                product.id, product.name, requested=-delta, available=product.stock
            )

        product.stock = new_stock
        log.info("stock.adjusted", stock=new_stock)
        return new_stock
