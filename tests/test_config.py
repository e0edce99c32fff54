"""
Tests for configuration module.
"""

import pytest

from jobnest.config import DEV_JWT_SECRET, Settings, get_settings


class TestSettings:
    """Settings tests."""

    def test_env_overrides_from_conftest(self):
        settings = get_settings()

        assert settings.identity_store == "memory"
        assert settings.auth_jwt_secret == "test-secret"
        assert settings.google.client_id == "test-client.apps.googleusercontent.com"
        assert settings.supabase.url == "https://project.supabase.co"

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("AUTH_JWT_SECRET")
        monkeypatch.delenv("IDENTITY_STORE")

        settings = Settings(_env_file=None)

        assert settings.auth_jwt_secret == DEV_JWT_SECRET
        assert settings.uses_dev_jwt_secret is True
        assert settings.identity_store == "supabase"
        assert settings.auth_jwt_algorithm == "HS256"
        assert settings.auth_session_ttl_seconds == 7 * 24 * 3600
        assert settings.identity_max_resolve_attempts == 3
        assert settings.supabase.users_table == "users"

    def test_production_flag(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")

        settings = Settings(_env_file=None)

        assert settings.is_production is True
        assert settings.uses_dev_jwt_secret is False

    def test_resolve_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, identity_max_resolve_attempts=0)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestExceptions:
    """Exception tests."""

    def test_unauthorized_exception(self):
        from jobnest.exceptions import UnauthorizedException

        exc = UnauthorizedException()
        assert exc.status_code == 401
        assert exc.code == "UNAUTHORIZED"

    def test_not_found_exception(self):
        from jobnest.exceptions import NotFoundException

        exc = NotFoundException("user", "123")
        assert exc.status_code == 404
        assert exc.code == "NOT_FOUND"
        assert "user" in exc.message

    def test_missing_field_lists_fields(self):
        from jobnest.exceptions import MissingFieldException

        exc = MissingFieldException("name", "role")
        assert exc.status_code == 400
        assert exc.code == "MISSING_FIELD"
        assert exc.details == {"fields": ["name", "role"]}

    def test_invalid_credential_and_upstream_are_distinct(self):
        from jobnest.exceptions import InvalidCredentialException, UpstreamUnavailableException

        invalid = InvalidCredentialException("Google", "bad signature")
        upstream = UpstreamUnavailableException("Google", "timeout")

        assert (invalid.status_code, invalid.code) == (401, "INVALID_CREDENTIAL")
        assert (upstream.status_code, upstream.code) == (503, "UPSTREAM_UNAVAILABLE")
        assert "bad signature" not in invalid.message

    def test_store_unavailable_message_is_opaque(self):
        from jobnest.exceptions import StoreUnavailableException

        exc = StoreUnavailableException("create")
        assert exc.status_code == 500
        assert exc.code == "STORE_UNAVAILABLE"
        assert "create" not in exc.message
