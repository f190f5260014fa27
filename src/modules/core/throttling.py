"""DRF throttles backed by the shared ``FixedWindowCounter``.

Three tiers, each keyed by client IP and configured in
``settings.RATE_LIMITS``:

- ``general``: every authenticated endpoint.
- ``strict``: sensitive writes (order creation).
- ``public``: unauthenticated endpoints (health).

``RateLimitFirstMixin`` moves the throttle check in front of
authentication so a flood of bad tokens is rejected before any verifier
call.
"""

from __future__ import annotations

import structlog
from django.apps import apps
from django.conf import settings
from rest_framework.exceptions import Throttled
from rest_framework.throttling import BaseThrottle

from modules.core.ratelimit import RateLimit

logger = structlog.get_logger(__name__)

DEFAULT_MESSAGE = "Rate limit exceeded. Please try again later."


class RateLimited(Throttled):
    """429 carrying the user-facing message of the tier that rejected."""

    def __init__(self, wait: float | None = None, message: str = DEFAULT_MESSAGE) -> None:
        super().__init__(wait=wait)
        self.message = message


def get_rate_limit_counter():
    return apps.get_app_config("core").rate_limit_counter


class FixedWindowRateThrottle(BaseThrottle):
    scope: str = ""
    message: str = DEFAULT_MESSAGE

    def __init__(self) -> None:
        self.decision = None
        self.now: float | None = None

    def get_rate(self) -> RateLimit:
        return RateLimit.parse(settings.RATE_LIMITS[self.scope])

    def allow_request(self, request, view) -> bool:
        counter = get_rate_limit_counter()
        ident = self.get_ident(request)
        self.decision = counter.hit(self.scope, ident, self.get_rate())
        self.now = counter.clock()
        if not self.decision.allowed:
            logger.warning(
                "rate_limit.exceeded",
                tier=self.scope,
                client_ip=ident,
                path=request.path,
                count=self.decision.count,
                limit=self.decision.limit,
            )
        return self.decision.allowed

    def wait(self) -> float | None:
        if self.decision is None or self.now is None:
            return None
        return self.decision.retry_after(self.now)


class GeneralRateThrottle(FixedWindowRateThrottle):
    scope = "general"


class StrictRateThrottle(FixedWindowRateThrottle):
    scope = "strict"
    message = "Rate limit exceeded for sensitive endpoint. Please try again later."


class PublicRateThrottle(FixedWindowRateThrottle):
    scope = "public"


class RateLimitFirstMixin:
    """Run throttles before authentication and permissions."""

    def initial(self, request, *args, **kwargs) -> None:
        self.format_kwarg = self.get_format_suffix(**kwargs)

        neg = self.perform_content_negotiation(request)
        request.accepted_renderer, request.accepted_media_type = neg

        version, scheme = self.determine_version(request, *args, **kwargs)
        request.version, request.versioning_scheme = version, scheme

        self.check_throttles(request)
        self.perform_authentication(request)
        self.check_permissions(request)

    def check_throttles(self, request) -> None:
        # every tier counts the request, even when an earlier one rejects it
        rejected = [
            throttle
            for throttle in self.get_throttles()
            if not throttle.allow_request(request, self)
        ]
        if not rejected:
            return
        waits = [w for w in (t.wait() for t in rejected) if w is not None]
        message = next(
            (t.message for t in rejected if t.message != DEFAULT_MESSAGE),
            DEFAULT_MESSAGE,
        )
        raise RateLimited(wait=max(waits, default=None), message=message)
