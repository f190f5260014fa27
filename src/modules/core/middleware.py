"""Request correlation and access logging.

Every request gets an id: the caller's ``X-Request-ID`` when it looks sane,
a fresh UUID4 otherwise.  The id and the client address are bound into
structlog contextvars, so every log line emitted while serving the request
(authentication, rate limiting, services, the exception handler) carries
them, and the id is echoed back in the response header.
"""

import re
import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"

# caller-supplied ids end up in logs: printable token characters only
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")

logger = structlog.get_logger(__name__)


def resolve_request_id(raw: str | None) -> str:
    if raw and _REQUEST_ID_PATTERN.match(raw):
        return raw
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = resolve_request_id(request.META.get("HTTP_X_REQUEST_ID"))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=request_id,
            client_ip=request.META.get("REMOTE_ADDR", ""),
        )

        log = logger.bind(method=request.method, path=request.path)
        log.info("request.started")

        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = round((time.monotonic() - started) * 1000, 2)

        log_method = log.warning if response.status_code >= 500 else log.info
        log_method(
            "request.finished",
            status_code=response.status_code,
            duration_ms=elapsed_ms,
        )

        response[REQUEST_ID_HEADER] = request_id
        return response
