"""Shared fixtures.

Every test runs against the in-memory users store with a fixed JWT secret,
so nothing here talks to Supabase or Google.
"""

from __future__ import annotations

import pytest

from jobnest.config import get_settings
from jobnest.deps import get_memory_users_repository
from jobnest.modules.identity.repository import InMemoryUsersRepository
from jobnest.observability import get_metrics_store


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch):
    # Keep tests deterministic even if a local .env points at real services.
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("IDENTITY_STORE", "memory")
    monkeypatch.setenv("AUTH_JWT_SECRET", "test-secret")
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "test-client.apps.googleusercontent.com")
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    get_settings.cache_clear()
    get_memory_users_repository.cache_clear()
    get_metrics_store().reset()
    yield
    get_settings.cache_clear()
    get_memory_users_repository.cache_clear()


@pytest.fixture
def repository() -> InMemoryUsersRepository:
    return InMemoryUsersRepository()
