"""Product DTOs for the catalog service.

Framework-agnostic data transfer objects using Pydantic v2.  DTOs are
immutable (``frozen=True``); build them from raw input with
``modules.core.dtos.parse_dto`` to get engine error kinds.

Bounds mirror the ``Product`` columns so that anything accepted here
can be stored and read back.

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: partial update; ``None`` means "keep".
- ``AdjustStockDTO``: signed stock delta.
- ``StockLevel``: result of a stock adjustment.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    StrictInt,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from modules.products.models import MAX_STOCK

_HTTP_URL = TypeAdapter(HttpUrl)


def _check_image_url(v: Optional[str]) -> Optional[str]:
    if v:
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError as exc:
            raise ValueError("Image URL must be an absolute http(s) URL.") from exc
    return v


class CreateProductDTO(BaseModel):
    """Validates:
    - ``name`` is non-empty.
    - ``price`` is a non-negative decimal with at most 2 decimal places
      and 10 digits.
    - ``stock`` is non-negative (defaults to 0).
    - ``image_url`` is blank or an http(s) URL.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    description: str = ""
    stock: int = Field(default=0, ge=0, le=MAX_STOCK)
    category: str = Field(default="", max_length=100)
    image_url: str = Field(default="", max_length=500)

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be empty.")
        return v.strip()

    @field_validator("image_url")
    @classmethod
    def image_url_must_be_http(cls, v: str) -> str:
        return _check_image_url(v)


class UpdateProductDTO(BaseModel):
    """All fields optional; stock is changed through ``adjust_stock`` only."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(
        default=None, ge=0, max_digits=10, decimal_places=2
    )
    category: Optional[str] = Field(default=None, max_length=100)
    image_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("image_url")
    @classmethod
    def image_url_must_be_http(cls, v: Optional[str]) -> Optional[str]:
        return _check_image_url(v)


class AdjustStockDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: StrictInt = Field(ge=-MAX_STOCK, le=MAX_STOCK)


class StockLevel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    stock: int
