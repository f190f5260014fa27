import sys
import time
from typing import Any, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.exceptions import debug_fields
from modules.core.throttling import PublicRateThrottle, RateLimitFirstMixin

logger = structlog.get_logger()


class HealthCheckView(RateLimitFirstMixin, APIView):
    """Liveness probe: public, counted against the ``public`` rate-limit tier.

    Reports ``ok`` with a timestamp when the database and the cache both
    answer, ``unhealthy`` with 503 otherwise.
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]
    throttle_classes = [PublicRateThrottle]

    def get(self, request: Request) -> Response:
        services: Dict[str, Dict[str, Any]] = {}
        overall_healthy = True

        # Check database
        try:
            start = time.monotonic()
            conn = connections["default"]
            conn.ensure_connection()
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            services["database"] = {
                "status": "up",
                "response_time_ms": round((time.monotonic() - start) * 1000, 2),
            }
        except Exception:
            services["database"] = {"status": "down"}
            overall_healthy = False
            logger.error("health_check_db_failure", exc_info=True)

        # Check cache (rate-limit counters)
        try:
            start = time.monotonic()
            cache.set("_health_check", "ok", 10)
            result = cache.get("_health_check")
            if result != "ok":
                raise ConnectionError("Cache read failed")
            services["cache"] = {
                "status": "up",
                "response_time_ms": round((time.monotonic() - start) * 1000, 2),
            }
        except Exception:
            services["cache"] = {"status": "down"}
            overall_healthy = False
            logger.error("health_check_cache_failure", exc_info=True)

        status_code = 200 if overall_healthy else 503

        logger.info(
            "health_check_completed", status="ok" if overall_healthy else "unhealthy"
        )

        return Response(
            {
                "status": "ok" if overall_healthy else "unhealthy",
                "timestamp": timezone.now().isoformat(),
                "services": services,
            },
            status=status_code,
        )


def route_not_found(
    request: HttpRequest, exception: Exception | None = None
) -> JsonResponse:
    """``handler404``: unmatched routes get the JSON error envelope too."""
    body: Dict[str, Any] = {
        "error": "Route not found",
        "message": f"Cannot {request.method} {request.get_full_path()}",
    }
    body.update(debug_fields(exception))
    return JsonResponse(body, status=404)


def server_error(request: HttpRequest) -> JsonResponse:
    """``handler500``: failures raised outside DRF views."""
    exc = sys.exc_info()[1]
    logger.error(
        "request.failed",
        method=request.method,
        path=request.path,
        error_type=type(exc).__name__ if exc is not None else None,
        exc_info=exc,
    )
    body: Dict[str, Any] = {"error": "Internal Server Error"}
    body.update(debug_fields(exc))
    return JsonResponse(body, status=500)
