"""DRF exception handler rendering engine errors in one envelope.

Body shape for every error response::

    {"type": "<kind>", "errors": [{"code": "<kind>", "detail": "<message>"}]}
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from modules.core.exceptions import (
    CannotCancelDelivered,
    Conflict,
    DomainError,
    InsufficientStock,
    InvalidArgument,
    InvalidStatusTransition,
    NotFound,
    ResourceBusy,
)

logger = structlog.get_logger(__name__)

# Most specific class first.
STATUS_BY_KIND = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InsufficientStock, status.HTTP_409_CONFLICT),
    (InvalidStatusTransition, status.HTTP_409_CONFLICT),
    (CannotCancelDelivered, status.HTTP_409_CONFLICT),
    (Conflict, status.HTTP_409_CONFLICT),
    (ResourceBusy, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: DomainError) -> int:
    for kind, http_status in STATUS_BY_KIND:
        if isinstance(exc, kind):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def domain_exception_handler(
    exc: Exception, context: Dict[str, Any]
) -> Optional[Response]:
    if isinstance(exc, ValidationError):
        # Framework-side validation (e.g. query filters) reads like DTO errors.
        exc = InvalidArgument(_describe(exc.detail))

    if isinstance(exc, DomainError):
        http_status = status_for(exc)
        logger.info(
            "api.domain_error",
            code=exc.code,
            status_code=http_status,
            detail=exc.message,
        )
        return Response(_envelope(exc.code, exc.message), status=http_status)

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    code = getattr(exc, "default_code", "error")
    detail = response.data.get("detail", response.data) if isinstance(
        response.data, dict
    ) else response.data
    response.data = _envelope(code, str(detail))
    return response


def _envelope(code: str, detail: str) -> Dict[str, Any]:
    return {"type": code, "errors": [{"code": code, "detail": detail}]}


def _describe(detail: Any) -> str:
    if isinstance(detail, dict):
        return "; ".join(
            f"{field}: {_describe(messages)}" for field, messages in detail.items()
        )
    if isinstance(detail, list):
        return " ".join(_describe(message) for message in detail)
    return str(detail)
