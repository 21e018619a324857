"""Product repository interface.

Extends ``IRepository[Product]`` with the row-locking read and the
guarded stock write used by ``StockAdjuster``.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db import models

    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List live products (lazy) with optional ORM look-ups."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Product]:
        """Retrieve a live product with a row-level lock (SELECT FOR UPDATE).

        Must be called inside a transaction.  Returns ``None`` if the
        product does not exist or has been retired.
        """

    @abstractmethod
    def apply_stock_delta(self, id: str, delta: int) -> Optional[int]:
        """Add *delta* to the stock counter unless it would go negative.

        Returns the new stock, or ``None`` when the guard rejected the
        write (the counter is left untouched).
        """

    @abstractmethod
    def retire(self, id: str) -> bool:
        """Retire a product; ``False`` if it was not found."""
