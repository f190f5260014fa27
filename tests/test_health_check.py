import pytest


class BrokenCache:
    def set(self, *args, **kwargs):
        raise ConnectionError("cache unavailable")

    def get(self, *args, **kwargs):
        raise ConnectionError("cache unavailable")


class TestHealthCheck:
    def test_health_check_returns_200(self, api_client):
        response = api_client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "timestamp" in data
        assert "services" in data

    def test_health_check_needs_no_token(self, api_client, token_verifier):
        response = api_client.get("/health")
        assert response.status_code == 200
        assert token_verifier.calls == []

    def test_health_check_ignores_bad_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer garbage")
        response = api_client.get("/health")
        assert response.status_code == 200

    def test_health_check_reports_database_status(self, api_client):
        data = api_client.get("/health").json()
        assert data["services"]["database"]["status"] == "up"
        assert "response_time_ms" in data["services"]["database"]

    def test_health_check_reports_cache_status(self, api_client):
        data = api_client.get("/health").json()
        assert data["services"]["cache"]["status"] == "up"
        assert "response_time_ms" in data["services"]["cache"]

    def test_cache_failure_returns_503(self, api_client, monkeypatch):
        monkeypatch.setattr("modules.core.views.cache", BrokenCache())
        response = api_client.get("/health")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["services"]["cache"]["status"] == "down"
        assert data["services"]["database"]["status"] == "up"


@pytest.mark.integration
class TestHealthRateLimit:
    def test_public_tier_applies(self, api_client, settings):
        settings.RATE_LIMITS = {**settings.RATE_LIMITS, "public": "2/60"}
        assert api_client.get("/health").status_code == 200
        assert api_client.get("/health").status_code == 200
        response = api_client.get("/health")
        assert response.status_code == 429
        assert response.json()["error"] == "Too many requests"
