"""Error taxonomy and the DRF exception handler.

Every failure leaves the API as ``{"error": <message>}`` with the matching
HTTP status.  ``ServiceError`` subclasses already carry a caller-safe
message and status and pass through unchanged.  Anything unrecognised is
reported as a bare 500 and logged with its traceback.

Outside ``ENVIRONMENT == "production"`` the body also carries ``details``
and ``stack`` for debugging.
"""

from __future__ import annotations

import traceback
from typing import Any

import structlog
from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import set_rollback

from modules.core.authentication import Unauthenticated
from modules.core.throttling import DEFAULT_MESSAGE, RateLimited

logger = structlog.get_logger(__name__)


class ServiceError(Exception):
    """Failure with a caller-safe message and an HTTP-equivalent status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InsufficientPermissions(ServiceError):
    """Caller is authenticated but lacks the required privileges."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class PersistenceError(ServiceError):
    """The store failed; the underlying error is logged, never returned."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Database operation failed."


def debug_fields(exc: BaseException | None) -> dict[str, Any]:
    """``details`` and ``stack`` for error bodies; empty in production."""
    if exc is None or settings.ENVIRONMENT == "production":
        return {}
    return {
        "details": {"type": type(exc).__name__, "message": str(exc)},
        "stack": "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ),
    }


def _map_exception(exc: Exception) -> tuple[int, dict[str, Any]]:
    if isinstance(exc, ServiceError):
        return exc.status_code, {"error": exc.message}

    if isinstance(exc, exceptions.Throttled):
        body: dict[str, Any] = {
            "error": "Too many requests",
            "message": exc.message if isinstance(exc, RateLimited) else DEFAULT_MESSAGE,
        }
        if exc.wait is not None:
            body["retryAfter"] = int(exc.wait)
        return status.HTTP_429_TOO_MANY_REQUESTS, body

    if isinstance(exc, Unauthenticated):
        return status.HTTP_401_UNAUTHORIZED, {"error": exc.error, "message": exc.message}

    if isinstance(exc, (exceptions.AuthenticationFailed, exceptions.NotAuthenticated)):
        return status.HTTP_401_UNAUTHORIZED, {
            "error": "Authentication required",
            "message": str(exc.detail),
        }

    if isinstance(exc, (exceptions.PermissionDenied, DjangoPermissionDenied)):
        return status.HTTP_403_FORBIDDEN, {
            "error": InsufficientPermissions.default_message,
            "message": str(getattr(exc, "detail", "")) or "Access denied",
        }

    if isinstance(exc, exceptions.ParseError):
        return status.HTTP_400_BAD_REQUEST, {
            "error": "Invalid JSON format in request body."
        }

    if isinstance(exc, (exceptions.NotFound, Http404)):
        return status.HTTP_404_NOT_FOUND, {"error": "Not found"}

    if isinstance(exc, exceptions.APIException):
        return exc.status_code, {"error": str(exc.detail)}

    return status.HTTP_500_INTERNAL_SERVER_ERROR, {
        "error": ServiceError.default_message
    }


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    """Terminal stage of the request pipeline (``EXCEPTION_HANDLER``)."""
    status_code, body = _map_exception(exc)
    request = context.get("request")

    headers: dict[str, str] = {}
    auth_header = getattr(exc, "auth_header", None)
    if auth_header:
        headers["WWW-Authenticate"] = auth_header
    if isinstance(exc, exceptions.Throttled) and exc.wait is not None:
        headers["Retry-After"] = "%d" % exc.wait

    if status_code >= 500:
        logger.error(
            "request.failed",
            error_type=type(exc).__name__,
            error=str(exc),
            method=getattr(request, "method", None),
            path=getattr(request, "path", None),
            client_ip=request.META.get("REMOTE_ADDR") if request is not None else None,
            exc_info=exc,
        )

    body.update(debug_fields(exc))

    set_rollback()
    return Response(body, status=status_code, headers=headers)
