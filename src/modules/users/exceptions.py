"""User domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import Conflict, NotFound


class UserNotFound(NotFound):
    default_message = "User not found."


class UserAlreadyExists(Conflict):
    """Another user already registered the same email."""

    code = "already_exists"
    default_message = "Email already exists."


class UserHasOrders(Conflict):
    """The user still owns orders, which keep their buyer reference."""

    code = "user_has_orders"
    default_message = "User has orders and cannot be deleted."
