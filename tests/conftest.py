import uuid

import pytest
from django.apps import apps
from rest_framework.test import APIClient

from modules.core.ratelimit import FixedWindowCounter
from modules.core.token_verifier import Claims, TokenErrorCode, TokenVerificationError

USER_TOKEN = "user-a-token"
OTHER_USER_TOKEN = "user-b-token"
ADMIN_TOKEN = "admin-token"


class FakeClock:
    """Settable wall clock for the rate-limit counter."""

    def __init__(self, now: float = 1_700_000_100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTokenVerifier:
    """In-memory verifier: known tokens map to claims or to a failure code."""

    def __init__(self) -> None:
        self.tokens: dict[str, Claims] = {}
        self.failures: dict[str, TokenErrorCode] = {}
        self.calls: list[str] = []

    def register(self, token: str, uid: str, **claims) -> None:
        self.tokens[token] = Claims(uid=uid, **claims)

    def fail(self, token: str, code: TokenErrorCode) -> None:
        self.failures[token] = code

    def verify(self, token: str) -> Claims:
        self.calls.append(token)
        if token in self.failures:
            raise TokenVerificationError(self.failures[token])
        if token not in self.tokens:
            raise TokenVerificationError(TokenErrorCode.MALFORMED, "unknown token")
        return self.tokens[token]


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def token_verifier(monkeypatch):
    verifier = FakeTokenVerifier()
    verifier.register(USER_TOKEN, "user-a", email="a@example.com")
    verifier.register(OTHER_USER_TOKEN, "user-b", email="b@example.com")
    verifier.register(ADMIN_TOKEN, "admin-1", admin=True)
    monkeypatch.setattr(apps.get_app_config("core"), "token_verifier", verifier)
    return verifier


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def rate_limit_counter(monkeypatch, clock):
    """Fresh counters per test: a unique key prefix isolates the shared cache."""
    counter = FixedWindowCounter(key_prefix=f"test-{uuid.uuid4().hex}", clock=clock)
    monkeypatch.setattr(apps.get_app_config("core"), "rate_limit_counter", counter)
    return counter


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


def make_client(token: str) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.fixture()
def user_client():
    """Client authenticated as ``user-a``."""
    return make_client(USER_TOKEN)


@pytest.fixture()
def other_user_client():
    """Client authenticated as ``user-b``."""
    return make_client(OTHER_USER_TOKEN)


@pytest.fixture()
def order_payload():
    return {
        "pickupAddress": "A",
        "dropoffAddress": "B",
        "latPickup": 40.7,
        "lngPickup": -74.0,
        "latDropoff": 40.8,
        "lngDropoff": -73.9,
        "amount": 25.5,
        "orderType": "DELIVERY",
    }
