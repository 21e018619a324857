import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware:
    """Tag every log line of a request with one correlation id.

    The id comes from ``X-Request-ID`` when the caller sends one, else a
    fresh UUID4.  It is echoed on the response so clients can quote it.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=cid,
            method=request.method,
            path=request.path,
        )

        started = time.monotonic()
        logger.info("request.started")
        response = self.get_response(request)
        duration_ms = round((time.monotonic() - started) * 1000, 2)

        logger.info(
            "request.finished",
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        response[REQUEST_ID_HEADER] = cid
        return response
