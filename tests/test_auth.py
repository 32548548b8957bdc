"""
Authentication tests: bearer JWTs and the cron secret, through real endpoints
"""

import time
import jwt
import pytest
from unittest.mock import AsyncMock, patch

from signalpage.config import settings

from service_mocks import USER_ID, mock_service, ok


def _token(**overrides):
    payload = {
        "sub": USER_ID,
        "email": "jane@example.com",
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
        **overrides,
    }
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm="HS256")


class TestBearerAuth:

    def test_missing_header_is_401(self, anonymous_client):
        response = anonymous_client.get("/api/notifications")
        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized"

    def test_non_bearer_header_is_401(self, anonymous_client):
        response = anonymous_client.get("/api/notifications", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_expired_token_is_401(self, anonymous_client):
        token = _token(exp=int(time.time()) - 60)
        response = anonymous_client.get("/api/notifications", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token expired"

    def test_wrong_audience_is_401(self, anonymous_client):
        token = _token(aud="anon")
        response = anonymous_client.get("/api/notifications", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_valid_token_reaches_handler_as_user(self, anonymous_client):
        service = mock_service(list_notifications=ok([]), unread_count=0)

        with patch("signalpage.api.routes.notifications.get_notifications_service", return_value=service):
            response = anonymous_client.get("/api/notifications", headers={"Authorization": f"Bearer {_token()}"})

        assert response.status_code == 200
        assert response.json() == {"notifications": [], "unreadCount": 0}
        assert service.list_notifications.call_args.args[0] == USER_ID


class TestCronAuth:

    def test_wrong_secret_is_401(self, anonymous_client):
        response = anonymous_client.post("/api/digest/weekly", headers={"X-Cron-Secret": "nope"})
        assert response.status_code == 401

    def test_valid_secret_runs_digest(self, anonymous_client):
        result = {"success": True, "queued": 2, "errors": 0, "duration_ms": 5}
        with patch("signalpage.api.routes.digest.run_weekly_digest", AsyncMock(return_value=result)):
            response = anonymous_client.post("/api/digest/weekly", headers={"X-Cron-Secret": "test-cron-secret"})

        assert response.status_code == 200
        assert response.json()["queued"] == 2

    def test_digest_failure_hides_exception_text(self, anonymous_client):
        failure = AsyncMock(side_effect=RuntimeError("Failed to fetch notification settings: relation missing"))
        with patch("signalpage.api.routes.digest.run_weekly_digest", failure):
            response = anonymous_client.post("/api/digest/weekly", headers={"X-Cron-Secret": "test-cron-secret"})

        assert response.status_code == 500
        assert response.json()["message"] == "Weekly digest failed"


class TestPublicEndpoints:

    def test_health_reports_database(self, anonymous_client):
        with patch("signalpage.api.routes.health.get_db_pool") as get_pool:
            conn = get_pool.return_value.acquire.return_value.__aenter__.return_value
            conn.fetchval = AsyncMock(return_value=1)
            response = anonymous_client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_without_database_is_503(self, anonymous_client):
        with patch("signalpage.api.routes.health.get_db_pool", return_value=None):
            response = anonymous_client.get("/")
        assert response.status_code == 503

    def test_health_failure_hides_exception_text(self, anonymous_client):
        with patch("signalpage.api.routes.health.get_db_pool") as get_pool:
            conn = get_pool.return_value.acquire.return_value.__aenter__.return_value
            conn.fetchval = AsyncMock(side_effect=OSError("connection refused to 10.0.0.5:5432"))
            response = anonymous_client.get("/")

        assert response.status_code == 503
        assert response.json()["message"] == "Health check failed"
