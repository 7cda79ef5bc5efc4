"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest
from django.apps import apps

from access_keys.application.services.activity_recorder import ActivityRecorder
from access_keys.application.services.validation_service import ValidationService
from access_keys.container import build_container
from access_keys.domain.key_record import KeyRecord
from access_keys.infrastructure.backends import InMemoryDocumentBackend
from access_keys.infrastructure.repositories.json_key_store import JsonDocumentKeyStore

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for deterministic tests."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Fixture for a clock fixed at T0."""
    return FakeClock()


@pytest.fixture
def backend():
    """Fixture for an empty in-memory document backend."""
    return InMemoryDocumentBackend()


@pytest.fixture
def store(backend):
    """Fixture for a KeyStore over the in-memory backend."""
    key_store = JsonDocumentKeyStore(backend)
    yield key_store
    key_store.close()


@pytest.fixture
def activity(store, clock):
    """Fixture for ActivityRecorder."""
    return ActivityRecorder(store, clock)


@pytest.fixture
def validation_service(store, clock, activity):
    """Fixture for ValidationService."""
    return ValidationService(store, clock, activity)


@pytest.fixture
def make_record(clock):
    """Factory fixture for KeyRecord entities created at the clock's time."""

    def _make(code="TEST-AAAA-BBBB", duration_days=30, uses=10, **kwargs):
        return KeyRecord.create(
            duration_days=duration_days,
            uses_limit=uses,
            code=code,
            now=kwargs.pop("now", clock()),
            **kwargs,
        )

    return _make


@pytest.fixture
def container(monkeypatch):
    """Fixture for a fresh in-memory key service container wired into the app."""
    key_container = build_container(
        {"DEFAULT_ADMIN_PASSWORD": "admin123"}, backend=InMemoryDocumentBackend()
    )
    monkeypatch.setattr(apps.get_app_config("access_keys"), "container", key_container)
    yield key_container
    key_container.close()


@pytest.fixture
def api_client(container):
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def admin_client(container):
    """Fixture for DRF API client carrying the admin credential."""
    from rest_framework.test import APIClient

    client = APIClient()
    client.credentials(HTTP_X_ADMIN_PASSWORD="admin123")
    return client
