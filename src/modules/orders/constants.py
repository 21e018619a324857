"""Order status enumeration and lifecycle rules.

``pending`` is the initial status; ``delivered`` and ``cancelled`` are
terminal.  Between the non-terminal statuses the order may move in any
direction (e.g. ``pending -> shipped`` or ``shipped -> processing``);
only terminal statuses are frozen.  Tightening this to forward-only is
a business decision that has not been taken.
"""

from __future__ import annotations

from django.db import models

from modules.core.exceptions import InvalidStatus


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"

    @classmethod
    def parse(cls, value: object) -> OrderStatus:
        """Return the member for *value*.

        Raises:
            InvalidStatus: *value* is not one of the recognised statuses.
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatus(status=value) from None


TERMINAL_STATES: frozenset[str] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)

CANCELLABLE_STATES: frozenset[str] = frozenset(
    {OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.SHIPPED}
)


def can_transition(current: str, new: str) -> bool:
    """Whether an order in *current* may be moved to *new*."""
    if current in TERMINAL_STATES:
        return False
    if new == OrderStatus.CANCELLED:
        return current in CANCELLABLE_STATES
    return new in OrderStatus.values


def can_cancel(current: str) -> bool:
    return current != OrderStatus.DELIVERED
