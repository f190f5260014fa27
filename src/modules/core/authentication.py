"""Bearer-token authentication backend for Django REST Framework.

Delegates token verification to the ``TokenVerifier`` owned by the core
app config (Firebase ID tokens by default, see ``token_verifier.py``).

Security decisions
------------------
* **Fail Closed**: a missing header, a wrong scheme, an empty token or any
  verifier failure ends the request with 401.
* The scheme prefix is the literal, case-sensitive ``"Bearer "``.
* Each rejection has its own user-facing message; the token itself is
  never logged.
"""

from __future__ import annotations

import structlog
from django.apps import apps
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from modules.core.token_verifier import Claims, TokenErrorCode, TokenVerificationError

logger = structlog.get_logger(__name__)

BEARER_PREFIX = "Bearer "


class Unauthenticated(AuthenticationFailed):
    """401 with a short ``error`` title and a longer user-facing ``message``."""

    def __init__(self, error: str, message: str, code: str) -> None:
        super().__init__(detail=message, code=code)
        self.error = error
        self.message = message


_VERIFY_FAILURES: dict[TokenErrorCode, tuple[str, str]] = {
    TokenErrorCode.EXPIRED: (
        "Token expired",
        "Your session has expired. Please sign in again.",
    ),
    TokenErrorCode.REVOKED: (
        "Token revoked",
        "Your session has been revoked. Please sign in again.",
    ),
    TokenErrorCode.MALFORMED: (
        "Invalid token",
        "The provided token is invalid or malformed.",
    ),
    TokenErrorCode.OTHER: (
        "Authentication failed",
        "Unable to authenticate request. Please check your token.",
    ),
}


class AuthenticatedUser:
    """Request principal built from verified claims.

    The identity provider is the source of truth; there is no local
    ``User`` row.  Views read ``request.user.uid`` / ``.claims`` and pass
    them explicitly to the service layer.
    """

    def __init__(self, claims: Claims) -> None:
        self.claims = claims

    # DRF checks
    is_authenticated = True
    is_active = True

    @property
    def uid(self) -> str:
        return self.claims.uid

    @property
    def is_admin(self) -> bool:
        return self.claims.admin

    def __str__(self) -> str:  # pragma: no cover
        return self.uid


def get_token_verifier():
    return apps.get_app_config("core").token_verifier


class FirebaseAuthentication(BaseAuthentication):
    """DRF authentication class that validates ``Authorization: Bearer`` tokens."""

    keyword = "Bearer"

    def authenticate(self, request):
        """Return ``(AuthenticatedUser, token)`` or raise ``Unauthenticated``."""
        log = logger.bind(method=request.method, path=request.path)
        header = request.META.get("HTTP_AUTHORIZATION", "")

        if not header:
            log.info("auth.header_missing")
            raise Unauthenticated(
                "Authorization header missing",
                "Please provide a valid Bearer token",
                code="header_missing",
            )

        if not header.startswith(BEARER_PREFIX):
            log.info("auth.header_malformed")
            raise Unauthenticated(
                "Invalid authorization format",
                'Authorization header must start with "Bearer "',
                code="header_malformed",
            )

        token = header[len(BEARER_PREFIX):]
        if not token:
            log.info("auth.token_empty")
            raise Unauthenticated(
                "Token missing",
                "Please provide a valid ID token",
                code="token_missing",
            )

        try:
            claims = get_token_verifier().verify(token)
        except TokenVerificationError as exc:
            error, message = _VERIFY_FAILURES.get(
                exc.code, _VERIFY_FAILURES[TokenErrorCode.OTHER]
            )
            log.warning("auth.token_rejected", reason=exc.code.value, error=str(exc))
            raise Unauthenticated(error, message, code=f"token_{exc.code.value}") from exc

        log.info("auth.token_verified", uid=claims.uid)
        return (AuthenticatedUser(claims), token)

    def authenticate_header(self, request):
        """Value for the ``WWW-Authenticate`` response header on 401."""
        return f'{self.keyword} realm="api"'
