"""Order domain exceptions.

Kinds shared with other modules (``MissingFields``, ``InvalidStatus``,
``CannotCancelDelivered`` ...) are re-exported so order callers can
import everything from one place.
"""

from __future__ import annotations

from modules.core.exceptions import (
    CannotCancelDelivered,
    InsufficientStock,
    InvalidArgument,
    InvalidStatus,
    InvalidStatusTransition,
    MissingFields,
    NotFound,
)
from modules.products.exceptions import ProductNotFound, ProductOutOfStock
from modules.users.exceptions import UserNotFound


class OrderNotFound(NotFound):
    """The order does not exist or has been cancelled (retired)."""

    default_message = "Order not found."


__all__ = [
    "CannotCancelDelivered",
    "InsufficientStock",
    "InvalidArgument",
    "InvalidStatus",
    "InvalidStatusTransition",
    "MissingFields",
    "OrderNotFound",
    "ProductNotFound",
    "ProductOutOfStock",
    "UserNotFound",
]
