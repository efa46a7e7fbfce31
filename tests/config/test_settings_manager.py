"""Unit tests for the SettingsManager singleton and configuration broker.

Tests cover:
- Singleton pattern and global access
- Loading settings from environment variables
- Settings validation and export
"""

import pytest
import os
from unittest.mock import patch

from src.config import (
    BroadcastBackend,
    Environment,
    EvictionFailurePolicy,
    SettingsManager,
    get_settings,
)


@pytest.fixture(autouse=True)
def reset_singleton():
    """Reset singleton before each test."""
    SettingsManager.reset_instance()
    yield
    SettingsManager.reset_instance()


def test_singleton_pattern():
    """Test that SettingsManager is a singleton."""
    settings1 = SettingsManager.get_instance()
    settings2 = SettingsManager.get_instance()

    assert settings1 is settings2


def test_get_settings_convenience():
    """Test convenience function."""
    assert get_settings() is SettingsManager.get_instance()


def test_setting_cache_defaults():
    """Cache TTL, token key and expiry defaults."""
    with patch.dict(os.environ, {}, clear=True):
        settings = SettingsManager.get_instance()

    assert settings.setting_cache.ttl_seconds == 15
    assert settings.setting_cache.change_token_key == "Setting::ChangeId"
    assert settings.setting_cache.change_token_expiry_seconds == 86400
    assert settings.setting_cache.eviction_failure_policy == EvictionFailurePolicy.LOG
    assert settings.setting_cache.refresh_on_change == ["auth_saml_credentials"]
    assert settings.broadcast.backend == BroadcastBackend.REDIS


def test_load_from_env():
    """Test loading settings from environment variables."""
    env_vars = {
        "APP_ENVIRONMENT": "production",
        "APP_DEBUG": "false",
        "APP_LOG_LEVEL": "info",

        "DATABASE_URL": "sqlite:///settings.db",
        "POSTGRESQL_PORT": "5433",
        "POSTGRESQL_USERNAME": "helpdesk",

        "REDIS_URL": "redis://cache:6380/2",
        "REDIS_SOCKET_TIMEOUT": "2.5",

        "SETTING_TTL": "30",
        "SETTING_EVICTION_FAILURE_POLICY": "RAISE",
        "SETTING_REFRESH_ON_CHANGE": "auth_saml_credentials, auth_oidc_credentials",

        "BROADCAST_BACKEND": "local",
        "BROADCAST_CHANNEL_PREFIX": "ws",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        settings = SettingsManager.get_instance()

        assert settings.application.environment == Environment.PRODUCTION
        assert settings.application.debug is False
        assert settings.application.log_level == "INFO"

        assert settings.database.url == "sqlite:///settings.db"
        assert settings.database.port == 5433
        assert settings.database.username == "helpdesk"

        assert settings.redis.url == "redis://cache:6380/2"
        assert settings.redis.socket_timeout_seconds == 2.5

        assert settings.setting_cache.ttl_seconds == 30
        assert settings.setting_cache.eviction_failure_policy == EvictionFailurePolicy.RAISE
        assert settings.setting_cache.refresh_on_change == [
            "auth_saml_credentials",
            "auth_oidc_credentials",
        ]

        assert settings.broadcast.backend == BroadcastBackend.LOCAL
        assert settings.broadcast.channel_prefix == "ws"


def test_load_from_env_with_prefix():
    """Test loading with environment variable prefix."""
    env_vars = {
        "FOO_POSTGRESQL_HOST": "prefixhost",
        "FOO_SETTING_TTL": "5",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        settings = SettingsManager.get_instance()
        settings.load_from_env(prefix="FOO_")

        assert settings.database.host == "prefixhost"
        assert settings.setting_cache.ttl_seconds == 5


def test_export_settings():
    """Test exporting settings."""
    settings = SettingsManager.get_instance()
    settings.redis.password_secret_name = "redis-password"

    exported = settings.export_settings(mask_secrets=True)
    assert exported["redis"]["password_secret_name"] == "***MASKED***"
    assert exported["redis"]["url"] == "***MASKED***"
    assert exported["setting_cache"]["eviction_failure_policy"] == "log"

    exported_unmasked = settings.export_settings(mask_secrets=False)
    assert exported_unmasked["redis"]["password_secret_name"] == "redis-password"


def test_validate_settings():
    """Test settings validation."""
    settings = SettingsManager.get_instance()
    settings.database.url = ""
    settings.database.host = "localhost"

    errors = settings.validate()
    assert len(errors) == 0

    settings.database.host = ""
    settings.database.port = 99999
    settings.setting_cache.ttl_seconds = -1
    settings.redis.url = ""

    errors = settings.validate()

    assert len(errors["database"]) >= 2
    assert "setting_cache" in errors
    assert "redis" in errors


def test_validate_skips_postgres_fields_with_url():
    settings = SettingsManager.get_instance()
    settings.database.url = "sqlite:///:memory:"
    settings.database.host = ""

    assert "database" not in settings.validate()


def test_environment_checks():
    """Test environment check methods."""
    settings = SettingsManager.get_instance()

    settings.application.environment = Environment.TESTING
    assert settings.is_development() is False
    assert settings.is_testing() is True
    assert settings.is_production() is False

    settings.application.environment = Environment.PRODUCTION
    assert settings.is_production() is True
