"""Read and write access to application settings.

Usage:
    from src.setting import init_setting_service

    service = init_setting_service()
    service.set("product_name", "Helpdesk")
    service.get("product_name")
"""

import copy
import time
from typing import Any, Callable, Iterable

from loguru import logger
from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError

from ..config import BroadcastBackend, EvictionFailurePolicy, SettingsManager
from ..database import SessionManager
from ..database.session import get_session_manager
from ..models import Setting
from ..repositories import SettingRepository
from ..services import MSG_CONFIG_CHANGED, AppVersionMarker, RedisCache
from .cache import MISSING, SettingCache
from .exceptions import SettingAlreadyExistsError, SettingNotFoundError
from .notifier import (
    AUTHENTICATED,
    PUBLIC,
    BroadcastNotifier,
    LocalBroadcastNotifier,
    RedisBroadcastNotifier,
    config_update_event,
)
from .token_store import ChangeTokenStore
from .validators import validate_setting


class SettingService:
    """Facade over the setting store, the process cache and change propagation."""

    def __init__(
        self,
        session_manager: SessionManager,
        cache: SettingCache,
        token_store: ChangeTokenStore,
        notifier: BroadcastNotifier,
        external_cache: RedisCache | None = None,
        app_version: AppVersionMarker | None = None,
        eviction_failure_policy: EvictionFailurePolicy = EvictionFailurePolicy.LOG,
        refresh_on_change: Iterable[str] = ("auth_saml_credentials",),
    ):
        self._session_manager = session_manager
        self.cache = cache
        self._token_store = token_store
        self._notifier = notifier
        self._external_cache = external_cache
        self._app_version = app_version
        self.eviction_failure_policy = eviction_failure_policy
        self.refresh_on_change = set(refresh_on_change)

    def get(self, name: str, strict: bool = False) -> Any:
        """Resolved value of a setting.

        Args:
            name: Setting name
            strict: Raise instead of returning None for an unknown name

        Raises:
            SettingNotFoundError: if ``strict`` and the setting does not exist
        """
        value = self.cache.get(name, MISSING)
        if value is MISSING:
            if strict:
                raise SettingNotFoundError(name)
            return None
        return value

    def exists(self, name: str) -> bool:
        return self.cache.contains(name)

    def set(self, name: str, value: Any) -> bool:
        """Store a new current value.

        Raises:
            SettingNotFoundError: if the setting does not exist
            SettingValidationError: if the value is rejected
        """
        with self._session_manager.session() as session:
            setting = self._find(SettingRepository(session), name)
            setting.state_current = {"value": value}
            validate_setting(setting)

        logger.info("Setting.set({!r}, {!r})", name, value)
        self._propagate(setting)
        return True

    def reset(self, name: str, force: bool = False) -> bool:
        """Restore the initial value.

        Without ``force`` nothing is written when the setting already holds
        its initial value.

        Raises:
            SettingNotFoundError: if the setting does not exist
        """
        with self._session_manager.session() as session:
            setting = self._find(SettingRepository(session), name)
            if not force and setting.state_current == setting.state_initial:
                return True
            setting.state_current = copy.deepcopy(setting.state_initial)

        logger.info("Setting.reset({!r}, {!r})", name, setting.state_current)
        self._propagate(setting)
        return True

    def reload(self) -> None:
        """Re-read every setting from the store."""
        self.cache.reload()

    def create(
        self,
        name: str,
        state: Any = None,
        title: str | None = None,
        area: str | None = None,
        description: str | None = None,
        options: dict | None = None,
        preferences: dict | None = None,
        frontend: bool = False,
    ) -> Setting:
        """Insert a new setting whose initial value is ``state``.

        Raises:
            SettingAlreadyExistsError: if the name is taken
            SettingValidationError: if the value is rejected
        """
        with self._session_manager.session() as session:
            repo = SettingRepository(session)
            if repo.get_by_name(name) is not None:
                raise SettingAlreadyExistsError(name)
            setting = repo.create_setting(
                name=name,
                state=state,
                title=title,
                area=area,
                description=description,
                options=options,
                preferences=preferences,
                frontend=frontend,
            )
            validate_setting(setting)

        logger.info("Setting.create({!r})", name)
        self._propagate(setting)
        return setting

    def create_if_not_exists(self, name: str, **fields) -> tuple[Setting, bool]:
        """Create the setting unless one with this name is already stored.

        Returns:
            ``(setting, created)``; ``created`` is False when the stored row
            was kept, including when another process inserted it first
        """
        try:
            return self.create(name, **fields), True
        except (SettingAlreadyExistsError, IntegrityError):
            with self._session_manager.session() as session:
                existing = SettingRepository(session).get_by_name(name)
            if existing is None:
                raise
            logger.debug("Setting {!r} already exists, skipping", name)
            return existing, False

    def _find(self, repo: SettingRepository, name: str) -> Setting:
        setting = repo.get_by_name(name)
        if setting is None:
            raise SettingNotFoundError(name)
        return setting

    def _propagate(self, setting: Setting) -> None:
        """Side effects of a committed create or update."""
        self._token_store.regenerate()
        self.cache.invalidate_check()
        self._evict(setting.name, setting.cache_keys)

        if setting.frontend:
            # Values may reference other settings, so broadcast the resolved one
            value = self.get(setting.name)
            audience = AUTHENTICATED if setting.requires_authentication else PUBLIC
            self._notifier.broadcast(config_update_event(setting.name, value), audience)
            self._notifier.trigger_subscription(setting.name, value)

        if setting.name in self.refresh_on_change and self._app_version is not None:
            self._app_version.set(True, MSG_CONFIG_CHANGED)

    def _evict(self, name: str, keys: list[str]) -> None:
        if not keys or self._external_cache is None:
            return
        try:
            removed = self._external_cache.delete_many(keys)
            logger.debug("Evicted {}/{} cache keys for setting {!r}", removed, len(keys), name)
        except RedisError as e:
            if self.eviction_failure_policy == EvictionFailurePolicy.RAISE:
                raise
            logger.warning("Failed to evict cache keys {} for setting {!r}: {}", keys, name, e)


# Global setting service instance
_setting_service: SettingService | None = None


def init_setting_service(
    settings: SettingsManager | None = None,
    session_manager: SessionManager | None = None,
    redis_cache: RedisCache | None = None,
    notifier: BroadcastNotifier | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> SettingService:
    """Wire the setting service and install it as the global instance."""
    global _setting_service
    settings = settings or SettingsManager.get_instance()
    session_manager = session_manager or get_session_manager()
    redis_cache = redis_cache or RedisCache.from_settings(settings)

    if notifier is None:
        if settings.broadcast.backend == BroadcastBackend.LOCAL:
            notifier = LocalBroadcastNotifier()
        else:
            notifier = RedisBroadcastNotifier(
                redis_cache,
                channel_prefix=settings.broadcast.channel_prefix,
                subscription_channel=settings.broadcast.subscription_channel,
            )

    token_store = ChangeTokenStore(
        redis_cache,
        key=settings.setting_cache.change_token_key,
        expiry_seconds=settings.setting_cache.change_token_expiry_seconds,
    )
    cache = SettingCache(
        session_manager,
        token_store,
        ttl_seconds=settings.setting_cache.ttl_seconds,
        clock=clock,
    )
    _setting_service = SettingService(
        session_manager=session_manager,
        cache=cache,
        token_store=token_store,
        notifier=notifier,
        external_cache=redis_cache,
        app_version=AppVersionMarker(redis_cache, notifier, key=settings.broadcast.app_version_key),
        eviction_failure_policy=settings.setting_cache.eviction_failure_policy,
        refresh_on_change=settings.setting_cache.refresh_on_change,
    )
    logger.info("Setting service initialized (ttl={}s)", settings.setting_cache.ttl_seconds)
    return _setting_service


def get_setting_service() -> SettingService:
    """Get the global setting service instance."""
    if _setting_service is None:
        raise RuntimeError(
            "Setting service not initialized. Call init_setting_service() first."
        )
    return _setting_service
