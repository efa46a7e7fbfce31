"""Settings manager with runtime configuration support.

This module provides a centralized settings broker that can:
- Load from environment variables
- Be modified at runtime
- Validate settings
- Support different environments (dev, test, prod)

These are the process bootstrap settings (database, Redis, cache TTL). The
application settings served to clients live in the database and are handled
by ``src.setting``.
"""

import os
from dataclasses import asdict, dataclass, field
from enum import Enum
from threading import Lock
from typing import Any, Dict, List, Optional

from loguru import logger


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class EvictionFailurePolicy(str, Enum):
    """What to do when evicting dependent cache keys fails."""

    LOG = "log"
    RAISE = "raise"


class BroadcastBackend(str, Enum):
    """Transport used to push change events to live clients."""

    REDIS = "redis"
    LOCAL = "local"


@dataclass
class Settings:
    """Base class for settings dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return asdict(self)


@dataclass
class ApplicationSettings(Settings):
    """Application-level settings."""

    name: str = "setting-cache"
    version: str = "test"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: str = "DEBUG"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["environment"] = self.environment.value  # Convert Enum to string
        return data


@dataclass
class StorageSettings(Settings):
    """Storage-related settings."""

    table_name_settings: str = "settings"


@dataclass
class DatabaseSettings(Settings):
    """Database connection settings.

    ``url`` takes precedence; otherwise a PostgreSQL URL is assembled from the
    remaining fields with an Azure AD access token as password.
    """

    url: str = ""
    host: str = "localhost"
    port: int = 5432
    name: str = "settings"
    username: str = ""
    schema: str = "public"
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False


@dataclass
class RedisSettings(Settings):
    """Redis connection settings for the change token, cache and broadcast."""

    url: str = "redis://localhost:6379/0"
    password_secret_name: str = ""
    connect_timeout_seconds: float = 5.0
    socket_timeout_seconds: float = 5.0
    max_connections: int = 20


@dataclass
class SettingCacheSettings(Settings):
    """Process-wide setting cache behaviour."""

    ttl_seconds: int = 15
    change_token_key: str = "Setting::ChangeId"
    change_token_expiry_seconds: int = 24 * 60 * 60
    eviction_failure_policy: EvictionFailurePolicy = EvictionFailurePolicy.LOG
    refresh_on_change: List[str] = field(default_factory=lambda: ["auth_saml_credentials"])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["eviction_failure_policy"] = self.eviction_failure_policy.value
        return data


@dataclass
class BroadcastSettings(Settings):
    """Live client notification settings."""

    backend: BroadcastBackend = BroadcastBackend.REDIS
    channel_prefix: str = "sessions"
    subscription_channel: str = "config_updates"
    app_version_key: str = "app_version"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["backend"] = self.backend.value
        return data


@dataclass
class AzureSettings(Settings):
    """Azure service settings for Key Vault and Application Insights."""

    key_vault_url: str = ""
    application_insights_key: str = ""


class SettingsManager:
    """Centralized settings manager with runtime configuration support.

    Features:
    - Singleton pattern for global access
    - Thread-safe operations
    - Runtime configuration changes
    - Environment variable loading
    - Validation

    Usage:
        # Get instance
        settings = SettingsManager.get_instance()

        # Access settings
        ttl = settings.setting_cache.ttl_seconds
    """

    _instance: Optional["SettingsManager"] = None
    _lock: Lock = Lock()

    def __init__(self):
        """Initialize settings manager.

        Note: Use get_instance() instead of direct instantiation.
        """
        self.application = ApplicationSettings()
        self.storage = StorageSettings()
        self.database = DatabaseSettings()
        self.redis = RedisSettings()
        self.setting_cache = SettingCacheSettings()
        self.broadcast = BroadcastSettings()
        self.azure = AzureSettings()
        self._change_lock = Lock()

    @classmethod
    def get_instance(cls) -> "SettingsManager":
        """Get or create the singleton instance using double-checked locking pattern.

        Returns:
            SettingsManager instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
                    cls._instance.load_from_env()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (mainly for testing)."""
        with cls._lock:
            cls._instance = None

    def load_from_env(self, prefix: str = "") -> None:
        """Load settings from environment variables.

        Args:
            prefix: Optional prefix for environment variables (e.g., "HELPDESK_")
        """
        with self._change_lock:

            env_vars = os.environ

            logger.info(
                "Loading settings from environment variables" + (f" with prefix={prefix}" if prefix else "")
            )

            # Application settings
            app_mapping = {
                f"{prefix}APP_NAME": "name",
                f"{prefix}APP_VERSION": "version",
                f"{prefix}APP_ENVIRONMENT": "environment",
                f"{prefix}APP_DEBUG": "debug",
                f"{prefix}APP_LOG_LEVEL": "log_level",
            }

            for env_key, attr_name in app_mapping.items():
                if env_key in env_vars:
                    value = env_vars[env_key]
                    if attr_name == "environment":
                        value = Environment(value.lower())
                    elif attr_name == "debug":
                        value = _to_bool(value)
                    elif attr_name == "log_level":
                        value = value.upper()
                    setattr(self.application, attr_name, value)

            if f"{prefix}TABLE_NAME_SETTINGS" in env_vars:
                self.storage.table_name_settings = env_vars[f"{prefix}TABLE_NAME_SETTINGS"]

            # Database settings
            db_mapping = {
                f"{prefix}DATABASE_URL": "url",
                f"{prefix}POSTGRESQL_HOST": "host",
                f"{prefix}POSTGRESQL_PORT": "port",
                f"{prefix}POSTGRESQL_DATABASE_NAME": "name",
                f"{prefix}POSTGRESQL_USERNAME": "username",
                f"{prefix}POSTGRESQL_SCHEMA": "schema",
                f"{prefix}POSTGRESQL_POOL_SIZE": "pool_size",
                f"{prefix}POSTGRESQL_MAX_OVERFLOW": "max_overflow",
                f"{prefix}POSTGRESQL_ECHO": "echo",
            }

            for env_key, attr_name in db_mapping.items():
                if env_key in env_vars:
                    value = env_vars[env_key]
                    # Type conversion
                    if attr_name in ["port", "pool_size", "max_overflow"]:
                        value = int(value)
                    elif attr_name == "echo":
                        value = _to_bool(value)
                    setattr(self.database, attr_name, value)

            # Redis settings
            redis_mapping = {
                f"{prefix}REDIS_URL": "url",
                f"{prefix}REDIS_PASSWORD_AZURE_KEY_VAULT_SECRET_NAME": "password_secret_name",
                f"{prefix}REDIS_CONNECT_TIMEOUT": "connect_timeout_seconds",
                f"{prefix}REDIS_SOCKET_TIMEOUT": "socket_timeout_seconds",
                f"{prefix}REDIS_MAX_CONNECTIONS": "max_connections",
            }
            for env_key, attr_name in redis_mapping.items():
                if env_key in env_vars:
                    value = env_vars[env_key]
                    if attr_name in ["connect_timeout_seconds", "socket_timeout_seconds"]:
                        value = float(value)
                    elif attr_name == "max_connections":
                        value = int(value)
                    setattr(self.redis, attr_name, value)

            # Setting cache
            cache_mapping = {
                f"{prefix}SETTING_TTL": "ttl_seconds",
                f"{prefix}SETTING_CHANGE_TOKEN_KEY": "change_token_key",
                f"{prefix}SETTING_CHANGE_TOKEN_EXPIRY": "change_token_expiry_seconds",
                f"{prefix}SETTING_EVICTION_FAILURE_POLICY": "eviction_failure_policy",
                f"{prefix}SETTING_REFRESH_ON_CHANGE": "refresh_on_change",
            }
            for env_key, attr_name in cache_mapping.items():
                if env_key in env_vars:
                    value = env_vars[env_key]
                    if attr_name in ["ttl_seconds", "change_token_expiry_seconds"]:
                        value = int(value)
                    elif attr_name == "eviction_failure_policy":
                        value = EvictionFailurePolicy(value.lower())
                    elif attr_name == "refresh_on_change":
                        value = [name.strip() for name in value.split(",") if name.strip()]
                    setattr(self.setting_cache, attr_name, value)

            # Broadcast
            broadcast_mapping = {
                f"{prefix}BROADCAST_BACKEND": "backend",
                f"{prefix}BROADCAST_CHANNEL_PREFIX": "channel_prefix",
                f"{prefix}BROADCAST_SUBSCRIPTION_CHANNEL": "subscription_channel",
                f"{prefix}BROADCAST_APP_VERSION_KEY": "app_version_key",
            }
            for env_key, attr_name in broadcast_mapping.items():
                if env_key in env_vars:
                    value = env_vars[env_key]
                    if attr_name == "backend":
                        value = BroadcastBackend(value.lower())
                    setattr(self.broadcast, attr_name, value)

            # Azure settings
            azure_mapping = {
                f"{prefix}AZURE_KEY_VAULT_URL": "key_vault_url",
                f"{prefix}AZURE_APPINSIGHTS_KEY": "application_insights_key",
            }

            for env_key, attr_name in azure_mapping.items():
                if env_key in env_vars:
                    setattr(self.azure, attr_name, env_vars[env_key])

            logger.info("Settings successfully loaded from environment")

    def export_settings(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Export all settings as a dictionary.

        Args:
            mask_secrets: If True, mask sensitive values like passwords and keys

        Returns:
            Dictionary containing all settings
        """
        settings = {
            "application": self.application.to_dict(),
            "storage": self.storage.to_dict(),
            "database": self.database.to_dict(),
            "redis": self.redis.to_dict(),
            "setting_cache": self.setting_cache.to_dict(),
            "broadcast": self.broadcast.to_dict(),
            "azure": self.azure.to_dict(),
        }

        if mask_secrets:
            # Mask sensitive fields
            sensitive_fields = [
                ("database", "url"),
                ("redis", "url"),
                ("redis", "password_secret_name"),
                ("azure", "application_insights_key"),
            ]
            for section, field_name in sensitive_fields:
                if settings[section] and settings[section][field_name]:
                    settings[section][field_name] = "***MASKED***"

        return settings

    def validate(self) -> Dict[str, List[str]]:
        """Validate current settings.

        Returns:
            Dictionary with validation errors by category
        """
        errors: Dict[str, List[str]] = {
            "application": [],
            "database": [],
            "redis": [],
            "setting_cache": [],
        }

        # Application validation
        if not self.application.name:
            errors["application"].append("Application name is required")
        if self.application.log_level not in [
            "DEBUG",
            "INFO",
            "WARNING",
            "ERROR",
            "CRITICAL",
        ]:
            errors["application"].append("Invalid log level")

        # Database validation
        if not self.database.url:
            if not self.database.host:
                errors["database"].append("Database host is required")
            if self.database.port < 1 or self.database.port > 65535:
                errors["database"].append("Database port must be between 1 and 65535")
            if not self.database.name:
                errors["database"].append("Database name is required")

        if not self.redis.url:
            errors["redis"].append("Redis URL is required")

        if self.setting_cache.ttl_seconds < 0:
            errors["setting_cache"].append("Setting TTL must not be negative")
        if self.setting_cache.change_token_expiry_seconds <= 0:
            errors["setting_cache"].append("Change token expiry must be positive")
        if not self.setting_cache.change_token_key:
            errors["setting_cache"].append("Change token key is required")

        # Remove empty error lists
        errors = {k: v for k, v in errors.items() if v}

        return errors

    def is_development(self) -> bool:
        """Check if current environment is development."""
        return self.application.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if current environment is testing."""
        return self.application.environment == Environment.TESTING

    def is_production(self) -> bool:
        """Check if current environment is production."""
        return self.application.environment == Environment.PRODUCTION


def _to_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


# Convenience function for global access
def get_settings() -> SettingsManager:
    """Get the global settings manager instance.

    Returns:
        SettingsManager singleton instance
    """
    return SettingsManager.get_instance()
