"""
Integration tests for the public key API endpoints.
"""
from datetime import datetime, timedelta, timezone

import pytest
from asgiref.sync import async_to_sync
from django.apps import apps
from django.urls import reverse

from access_keys.container import build_container
from access_keys.domain.key_record import KeyRecord
from access_keys.infrastructure.backends import InMemoryDocumentBackend


class UnreachableBackend(InMemoryDocumentBackend):
    """Backend whose storage cannot be reached."""

    def load(self):
        raise OSError("disk not mounted")


def seed(container, code="TEST-AAAA-BBBB", duration_days=30, uses=10, now=None):
    record = KeyRecord.create(
        duration_days=duration_days,
        uses_limit=uses,
        code=code,
        now=now or datetime.now(timezone.utc),
    )
    return async_to_sync(container.store.put)(record)


@pytest.mark.integration
class TestValidateAPI:
    """Integration tests for POST /api/v1/validate."""

    def test_validate_success(self, api_client, container):
        """Test that a valid key is accepted and one use is consumed."""
        record = seed(container, uses=10)

        response = api_client.post(
            reverse("validate-key"),
            {"key": record.code},
            format="json",
            HTTP_USER_AGENT="pytest-client",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["status"] == "active"
        assert data["message"] == "Access granted"
        assert data["key_data"]["key"] == record.code
        assert data["key_data"]["uses_remaining"] == 9
        assert data["key_data"]["days_remaining"] == 30
        stored = async_to_sync(container.store.get)(record.code)
        assert stored.uses_remaining == 9
        assert stored.usage_log[0].client_agent == "pytest-client"
        assert "X-Correlation-ID" in response

    def test_validate_normalizes_input(self, api_client, container):
        record = seed(container)

        response = api_client.post(
            reverse("validate-key"), {"key": f"  {record.code.lower()} "}, format="json"
        )

        assert response.json()["valid"] is True

    def test_validate_unknown_key(self, api_client, container):
        response = api_client.post(reverse("validate-key"), {"key": "NOPE-NOPE-NOPE"}, format="json")

        assert response.status_code == 200
        assert response.json() == {
            "valid": False,
            "message": "Key not found",
            "status": "invalid",
        }

    def test_validate_exhausted_key(self, api_client, container):
        record = seed(container, uses=1)
        url = reverse("validate-key")

        first = api_client.post(url, {"key": record.code}, format="json")
        second = api_client.post(url, {"key": record.code}, format="json")

        assert first.json()["valid"] is True
        assert second.json()["status"] == "exhausted"
        assert second.json()["message"] == "No uses remaining"

    def test_validate_expired_key(self, api_client, container):
        record = seed(
            container,
            duration_days=1,
            now=datetime.now(timezone.utc) - timedelta(days=3),
        )

        response = api_client.post(reverse("validate-key"), {"key": record.code}, format="json")

        assert response.json()["status"] == "expired"
        assert async_to_sync(container.store.get)(record.code).status.value == "expired"

    def test_validate_missing_key(self, api_client, container):
        response = api_client.post(reverse("validate-key"), {}, format="json")

        assert response.status_code == 400
        assert "key" in response.json()["error"]

    def test_validate_malformed_json(self, api_client, container):
        response = api_client.post(
            reverse("validate-key"), data="{not json", content_type="application/json"
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PARSE_ERROR"

    def test_validate_store_unavailable(self, api_client, monkeypatch):
        """Test that a store failure is reported as status error with 503."""
        broken = build_container({}, backend=UnreachableBackend())
        monkeypatch.setattr(apps.get_app_config("access_keys"), "container", broken)

        response = api_client.post(
            reverse("validate-key"), {"key": "TEST-AAAA-BBBB"}, format="json"
        )

        assert response.status_code == 503
        assert response.json()["valid"] is False
        assert response.json()["status"] == "error"


@pytest.mark.integration
class TestStatusAPI:
    """Integration tests for POST /api/v1/status."""

    def test_status_does_not_consume(self, api_client, container):
        record = seed(container, uses=10)
        url = reverse("key-status")

        api_client.post(url, {"key": record.code}, format="json")
        response = api_client.post(url, {"key": record.code}, format="json")

        assert response.status_code == 200
        data = response.json()
        assert data["found"] is True
        assert data["status"] == "active"
        assert data["uses_remaining"] == 10
        assert data["total_uses"] == 10
        assert data["days_remaining"] == 30

    def test_status_unknown_key(self, api_client, container):
        response = api_client.post(reverse("key-status"), {"key": "NOPE-NOPE-NOPE"}, format="json")

        assert response.json() == {"found": False}

    def test_status_store_unavailable(self, api_client, monkeypatch):
        broken = build_container({}, backend=UnreachableBackend())
        monkeypatch.setattr(apps.get_app_config("access_keys"), "container", broken)

        response = api_client.post(reverse("key-status"), {"key": "TEST-AAAA-BBBB"}, format="json")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "STORE_UNAVAILABLE"
        assert response["Retry-After"] == "5"


@pytest.mark.integration
class TestPublicEndpoints:
    """Integration tests for settings, stats and health endpoints."""

    def test_settings_hide_password(self, api_client, container):
        response = api_client.get(reverse("public-settings"))

        assert response.status_code == 200
        assert response.json() == {
            "redirect_url": "https://your-site.com/purchase",
            "auto_expire": True,
            "enable_logging": True,
        }

    def test_stats(self, api_client, container):
        seed(container, code="AAAA-1111", uses=5)
        seed(container, code="BBBB-2222", uses=5)
        async_to_sync(container.store.add_revenue)(180)
        api_client.post(reverse("validate-key"), {"key": "AAAA-1111"}, format="json")

        response = api_client.get(reverse("stats"))

        assert response.json() == {
            "total_keys": 2,
            "active_keys": 2,
            "expired_keys": 0,
            "total_revenue": 180.0,
            "total_uses": 1,
        }

    def test_health(self, api_client):
        response = api_client.get(reverse("health"))

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, api_client, container):
        response = api_client.get(reverse("ready"))

        assert response.status_code == 200

    def test_ready_store_unavailable(self, api_client, monkeypatch):
        broken = build_container({}, backend=UnreachableBackend())
        monkeypatch.setattr(apps.get_app_config("access_keys"), "container", broken)

        response = api_client.get(reverse("ready"))

        assert response.status_code == 503
