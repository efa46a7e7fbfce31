"""Application version marker; changing it makes connected clients reload."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from loguru import logger

from .redis_cache import RedisCache

if TYPE_CHECKING:
    from ..setting.notifier import BroadcastNotifier

MSG_APP_VERSION = "app_version"
MSG_CONFIG_CHANGED = "config_changed"


class AppVersionMarker:
    """Stores ``<timestamp>:<reload_required>`` under a well-known key."""

    def __init__(
        self,
        cache: RedisCache,
        notifier: "BroadcastNotifier",
        key: str = "app_version",
    ):
        self._cache = cache
        self._notifier = notifier
        self._key = key

    def get(self) -> str | None:
        return self._cache.get_value(self._key)

    def set(self, reload_required: bool = False, message: str = MSG_APP_VERSION) -> str:
        """Write a new version marker and tell every client about it."""
        version = f"{datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S:%f')}:{str(reload_required).lower()}"
        logger.info("Update app version to {} ({})", version, message)
        self._cache.set_value(self._key, version)
        self._notifier.broadcast(
            {
                "event": "maintenance",
                "data": {"type": message, "app_version": version},
            },
            "public",
        )
        return version
