"""Configuration management with runtime settings broker.

Responsibilities:
- Singleton settings manager for global configuration access
- Settings loading from environment variables
- Thread-safe configuration management
"""

from .settings_manager import (
    ApplicationSettings,
    StorageSettings,
    DatabaseSettings,
    RedisSettings,
    SettingCacheSettings,
    BroadcastSettings,
    AzureSettings,
    BroadcastBackend,
    Environment,
    EvictionFailurePolicy,
    SettingsManager,
    get_settings,
)

__all__ = [
    "SettingsManager",
    "ApplicationSettings",
    "StorageSettings",
    "DatabaseSettings",
    "RedisSettings",
    "SettingCacheSettings",
    "BroadcastSettings",
    "AzureSettings",
    "BroadcastBackend",
    "Environment",
    "EvictionFailurePolicy",
    "get_settings",
]
