"""User model referenced by orders.

The order engine only checks that a user exists; account management
(login, sessions, roles enforcement) lives outside this project.
Passwords are stored through Django's configured password hasher.
"""

from __future__ import annotations

from django.contrib.auth.hashers import check_password, make_password
from django.db import models

from modules.core.models import BaseModel


class UserRole(models.TextChoices):
    USER = "user", "User"
    ADMIN = "admin", "Admin"


class User(BaseModel):
    """Storefront account.

    ``email`` is normalised to lowercase on save so that uniqueness is
    case-insensitive.
    """

    email = models.EmailField(max_length=254, unique=True)
    name = models.CharField(max_length=255)
    password = models.CharField(max_length=128)
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.USER,
    )

    class Meta:
        db_table = "users"
        ordering = ["-created_at"]

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password(raw_password, self.password)

    def save(self, *args, **kwargs) -> None:
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"
