"""User DTOs (pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from modules.users.models import UserRole


class CreateUserDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    name: str = Field(max_length=255)
    password: str
    role: UserRole = UserRole.USER

    @field_validator("name", "password")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank.")
        return v


class UpdateUserDTO(BaseModel):
    """Partial profile update; ``None`` keeps the stored value.

    The password is not changed here.
    """

    model_config = ConfigDict(frozen=True)

    email: Optional[EmailStr] = None
    name: Optional[str] = Field(default=None, max_length=255)
    role: Optional[UserRole] = None

    @field_validator("name")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("must not be blank.")
        return v
