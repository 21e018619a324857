"""Error kinds surfaced by the order engine.

Every failure leaves the engine through one of these classes.  Each kind
carries a stable ``code`` and a default message so the HTTP layer (see
``modules.core.exception_handler``) can render it without inspecting the
message text.  Entity-specific subclasses live in each module's
``exceptions.py``.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all engine failures."""

    code = "domain_error"
    default_message = "The operation could not be completed."

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class NotFound(DomainError):
    """A referenced user, product or order does not exist."""

    code = "not_found"
    default_message = "Resource not found."


class MissingFields(DomainError):
    """A required input is absent or empty."""

    code = "missing_fields"
    default_message = "Missing required fields."


class InvalidArgument(DomainError):
    """An input is present but violates its constraints (e.g. negative price)."""

    code = "invalid_argument"
    default_message = "Invalid argument."


class InsufficientStock(DomainError):
    """A stock decrement would leave a product below zero."""

    code = "insufficient_stock"
    default_message = "Insufficient stock."


class InvalidStatus(DomainError):
    """The requested order status is not one of the recognised values."""

    code = "invalid_status"
    default_message = (
        "Invalid status. Must be one of: "
        "pending, processing, shipped, delivered, cancelled"
    )


class InvalidStatusTransition(InvalidStatus):
    """The order is in a terminal status and can no longer change."""

    code = "invalid_status_transition"
    default_message = "Order status can no longer change."


class CannotCancelDelivered(DomainError):
    code = "cannot_cancel_delivered"
    default_message = "Cannot cancel delivered order."


class Conflict(DomainError):
    """The request clashes with existing data (duplicate key, row in use)."""

    code = "conflict"
    default_message = "The resource conflicts with existing data."


class ResourceBusy(DomainError):
    """A lock could not be acquired within ``STOCK_LOCK_TIMEOUT``."""

    code = "resource_busy"
    default_message = "Resource is busy, retry later."
