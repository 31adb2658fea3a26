"""Unit tests for settings validation."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from ibcrm.shared.config import Settings


def _settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite://",
        "jwt_access_secret": "access",
        "jwt_refresh_secret": "refresh",
        "jwt_reset_secret": "reset",
    }
    values.update(overrides)
    return Settings(**values)


class TestSecrets:
    """Token secrets must be present and distinct."""

    def test_distinct_secrets_accepted(self):
        settings = _settings()

        assert settings.jwt_access_secret == "access"

    def test_shared_secret_rejected(self):
        with pytest.raises(ValidationError):
            _settings(jwt_refresh_secret="access")

    def test_empty_secret_rejected(self):
        with pytest.raises(ValidationError):
            _settings(jwt_reset_secret="")


class TestDerivedValues:
    """Convenience properties."""

    def test_default_lifetimes(self):
        settings = _settings()

        assert settings.access_token_ttl == timedelta(hours=24)
        assert settings.refresh_token_ttl == timedelta(days=7)
        assert settings.lockout_duration == timedelta(hours=2)
        assert settings.max_login_attempts == 5

    def test_cors_origins_list(self):
        settings = _settings(cors_origins="https://a.example, https://b.example,")

        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_production_has_no_default_origins(self):
        settings = _settings(environment="production")

        assert settings.is_production
        assert settings.cors_origins_list == []
