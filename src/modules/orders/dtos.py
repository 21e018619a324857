"""Order DTOs for the ledger.

Framework-agnostic input contracts using Pydantic v2 (immutable).

- ``CreateOrderItemDTO``: one requested (product, quantity) pair.
- ``CreateOrderDTO``: order creation request.  ``user_id`` and
  ``items`` are optional at this level so the ledger can report an
  absent or empty cart as ``MissingFields``.
- ``OrderFilterDTO``: list filters.
- ``UpdateStatusDTO``: status change request.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator


class CreateOrderItemDTO(BaseModel):
    """Price is not accepted from the caller; it is read from the catalog."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: StrictInt

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    items: Optional[List[CreateOrderItemDTO]] = None
    shipping_address: str = ""

    @field_validator("shipping_address", mode="before")
    @classmethod
    def blank_when_absent(cls, v: Optional[str]) -> str:
        return v or ""


class OrderFilterDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    status: Optional[str] = None


class UpdateStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    notes: str = ""
