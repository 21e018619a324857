"""Product domain exceptions.

Raised by the catalog and by ``StockAdjuster``.  The HTTP layer renders
them through ``modules.core.exception_handler``.
"""

from __future__ import annotations

from modules.core.exceptions import InsufficientStock, NotFound


class ProductNotFound(NotFound):
    """The product does not exist or has been retired."""

    default_message = "Product not found."


class ProductOutOfStock(InsufficientStock):
    """Raised when a decrement would push a product's stock below zero.

    ``context`` carries ``product_id``, ``requested`` and ``available``.
    """

    @classmethod
    def for_product(
        cls, product_id: object, name: str, requested: int, available: int
    ) -> ProductOutOfStock:
        return cls(
            f"Insufficient stock for product: {name}",
            product_id=str(product_id),
            requested=requested,
            available=available,
        )
