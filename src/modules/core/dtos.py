"""Helpers for building service-layer DTOs from raw caller input."""

from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from modules.core.exceptions import InvalidArgument, MissingFields

D = TypeVar("D", bound=BaseModel)


def parse_dto(dto_class: Type[D], data: Mapping[str, Any]) -> D:
    """Validate *data* into *dto_class*, translating pydantic errors.

    A field that is absent becomes ``MissingFields``; any other
    violation becomes ``InvalidArgument``.  The message lists the
    offending fields so callers can show it as-is.
    """
    try:
        return dto_class.model_validate(dict(data))
    except PydanticValidationError as exc:
        errors = exc.errors()
        missing = [_loc(err) for err in errors if err["type"] == "missing"]
        if missing:
            raise MissingFields(
                f"Missing required fields: {', '.join(missing)}",
                fields=missing,
            ) from exc
        details = "; ".join(f"{_loc(err)}: {err['msg']}" for err in errors)
        raise InvalidArgument(details, fields=[_loc(err) for err in errors]) from exc


def _loc(error: Mapping[str, Any]) -> str:
    return ".".join(str(part) for part in error["loc"])


def drop_nulls(data: Mapping[str, Any]) -> dict:
    """Drop explicit nulls so partial payloads read them as "not supplied"."""
    return {key: value for key, value in data.items() if value is not None}
