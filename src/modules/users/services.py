"""User service layer.

Account administration over HTTP and for seeding.  The order engine
only uses ``get_user`` as an existence check.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError

from modules.users.exceptions import UserAlreadyExists, UserHasOrders, UserNotFound
from modules.users.models import User

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.users.dtos import CreateUserDTO, UpdateUserDTO
    from modules.users.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = ("email", "name", "role")


class UserService:
    def __init__(self, repository: IUserRepository) -> None:
        self._repo = repository

    @transaction.atomic
    def create_user(self, dto: CreateUserDTO) -> User:
        """Register a new user.

        Raises:
            UserAlreadyExists: the email is already registered.
        """
        if self._repo.get_by_email(dto.email):
            logger.warning("user.duplicate_email")
            raise UserAlreadyExists()

        user = User(email=dto.email, name=dto.name, role=dto.role)
        user.set_password(dto.password)
        user = self._save(user)
        logger.info("user.created", user_id=str(user.id), role=user.role)
        return user

    @transaction.atomic
    def update_user(self, id: str, dto: UpdateUserDTO) -> User:
        """Apply the supplied profile fields.

        Raises:
            UserNotFound: unknown user.
            UserAlreadyExists: the new email belongs to another user.
        """
        user = self.get_user(id)

        if dto.email is not None:
            owner = self._repo.get_by_email(dto.email)
            if owner and owner.id != user.id:
                logger.warning("user.duplicate_email", user_id=str(user.id))
                raise UserAlreadyExists()

        changed = []
        for field in UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(user, field, value)
                changed.append(field)

        user = self._save(user)
        logger.info("user.updated", user_id=str(user.id), fields=changed)
        return user

    @transaction.atomic
    def delete_user(self, id: str) -> None:
        """Remove a user that owns no orders.

        Raises:
            UserNotFound: unknown user.
            UserHasOrders: orders (cancelled ones included) still
                reference the user.
        """
        user = self.get_user(id)
        try:
            self._repo.delete(user)
        except ProtectedError as exc:
            logger.warning("user.delete_refused", user_id=str(id))
            raise UserHasOrders(user_id=str(id)) from exc
        logger.info("user.deleted", user_id=str(id))

    def get_user(self, id: str) -> User:
        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User not found: {id}", user_id=id)
        return user

    def list_users(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[User]:
        return self._repo.list(filters)

    def _save(self, user: User) -> User:
        # Two writers racing on one email: the unique index decides.
        try:
            return self._repo.save(user)
        except IntegrityError as exc:
            raise UserAlreadyExists() from exc
