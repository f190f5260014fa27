"""Identity-provider token verification.

The authentication gate depends only on the ``TokenVerifier`` protocol:
``verify(token) -> Claims`` or ``TokenVerificationError`` carrying one of
the ``TokenErrorCode`` values.

``FirebaseTokenVerifier`` validates Firebase ID tokens with PyJWT:

* RS256 only, never derived from the incoming token header.
* Google's signing keys are fetched from the published JWKS and cached
  in-memory by ``PyJWKClient`` (no network call on every request).
* Audience is the Firebase project id, issuer is
  ``https://securetoken.google.com/<project id>``.
* ``exp``, ``iat`` and ``sub`` are required; ``auth_time`` must not lie in
  the future.

Revocation cannot be detected from the token alone, so ``REVOKED`` is only
produced by verifiers that consult the provider.
"""

from __future__ import annotations

import time
from enum import StrEnum
from typing import Any, Protocol

import jwt as pyjwt
import structlog
from jwt import PyJWKClient
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError, PyJWKClientError
from pydantic import BaseModel, ConfigDict

logger = structlog.get_logger(__name__)

FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"


class TokenErrorCode(StrEnum):
    EXPIRED = "expired"
    REVOKED = "revoked"
    MALFORMED = "malformed"
    OTHER = "other"


class TokenVerificationError(Exception):
    """The verifier rejected a token; ``code`` says why."""

    def __init__(self, code: TokenErrorCode, message: str = "") -> None:
        self.code = code
        super().__init__(message or code.value)


class Claims(BaseModel):
    """Verified identity attributes of the caller."""

    model_config = ConfigDict(frozen=True)

    uid: str
    email: str | None = None
    email_verified: bool = False
    name: str | None = None
    picture: str | None = None
    auth_time: int | None = None
    iat: int | None = None
    exp: int | None = None
    admin: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Claims:
        return cls(
            uid=payload.get("user_id") or payload["sub"],
            email=payload.get("email"),
            email_verified=bool(payload.get("email_verified", False)),
            name=payload.get("name"),
            picture=payload.get("picture"),
            auth_time=payload.get("auth_time"),
            iat=payload.get("iat"),
            exp=payload.get("exp"),
            admin=bool(payload.get("admin", False)),
        )


class TokenVerifier(Protocol):
    def verify(self, token: str) -> Claims: ...


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens against Google's published signing keys."""

    algorithm = "RS256"

    def __init__(
        self,
        project_id: str,
        jwks_url: str,
        jwks_client: Any | None = None,
        leeway: int = 0,
    ) -> None:
        self.project_id = project_id
        self.issuer = f"{FIREBASE_ISSUER_PREFIX}{project_id}" if project_id else ""
        self.leeway = leeway
        self._jwks_client = jwks_client or PyJWKClient(
            jwks_url, cache_jwk_set=True, lifespan=300
        )

    @classmethod
    def from_settings(cls, settings: Any) -> FirebaseTokenVerifier:
        return cls(
            project_id=settings.FIREBASE_PROJECT_ID,
            jwks_url=settings.FIREBASE_JWKS_URL,
        )

    def verify(self, token: str) -> Claims:
        if not self.project_id:
            raise TokenVerificationError(
                TokenErrorCode.OTHER, "FIREBASE_PROJECT_ID is not configured."
            )

        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            payload = pyjwt.decode(
                token,
                signing_key.key,
                algorithms=[self.algorithm],
                audience=self.project_id,
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": ["exp", "iat", "sub"]},
            )
        except ExpiredSignatureError as exc:
            raise TokenVerificationError(TokenErrorCode.EXPIRED, str(exc)) from exc
        except PyJWKClientError as exc:
            logger.warning("auth.jwks_unavailable", error=str(exc))
            raise TokenVerificationError(TokenErrorCode.OTHER, str(exc)) from exc
        except InvalidTokenError as exc:
            raise TokenVerificationError(TokenErrorCode.MALFORMED, str(exc)) from exc

        if not payload.get("sub"):
            raise TokenVerificationError(TokenErrorCode.MALFORMED, "Empty subject.")
        auth_time = payload.get("auth_time")
        if auth_time is not None and auth_time > time.time() + self.leeway:
            raise TokenVerificationError(
                TokenErrorCode.MALFORMED, "auth_time is in the future."
            )

        return Claims.from_payload(payload)
