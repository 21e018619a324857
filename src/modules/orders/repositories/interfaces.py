"""Order repository interface.

Extends ``IRepository[Order]`` with the operations the ledger and the
status machine need: creation of the order together with its line
items, row-locked reads, retirement and the status audit trail.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate (Order + OrderItems)."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Persist an order and its items.

        ``data`` keys: ``user_id``, ``total``, ``shipping_address`` and
        ``items`` (dicts with ``product_id``, ``quantity``, ``price``).
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve a live order with its live items prefetched."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve a live order with a row-level lock."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List live orders, newest first.  Keys: ``user_id``, ``status``."""

    @abstractmethod
    def retire(self, order: Order) -> Order:
        """Retire an order together with its items."""

    @abstractmethod
    def add_history(
        self,
        order_id: Any,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Append a status change to the order's audit trail."""
