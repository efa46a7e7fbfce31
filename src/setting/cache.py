"""Process-wide cache of resolved setting values."""

import copy
import time
from datetime import datetime
from threading import RLock
from typing import Any, Callable

from loguru import logger

from ..database import SessionManager, utcnow
from ..repositories import SettingRepository
from .interpolation import resolve_all
from .token_store import ChangeTokenStore

MISSING = object()


class SettingCache:
    """Resolved setting values shared by every thread of the process.

    A cached snapshot is trusted for ``ttl_seconds`` after the last check.
    After that the shared change token is compared with the one seen at the
    last load; a mismatch triggers an incremental reload of the rows updated
    since then.

    An empty snapshot is never trusted, so while the store holds no rows
    every read queries it again.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        token_store: ChangeTokenStore,
        ttl_seconds: float = 15,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._session_manager = session_manager
        self._token_store = token_store
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = RLock()

        self.raw: dict[str, Any] = {}
        self.current: dict[str, Any] = {}
        self.change_token: str | None = None
        self.last_loaded_at: datetime | None = None
        self.last_checked_at: float | None = None

    def get(self, name: str, default: Any = None) -> Any:
        """Deep copy of the resolved value of ``name``, or ``default``."""
        with self._lock:
            self.load()
            if name not in self.current:
                return default
            return copy.deepcopy(self.current[name])

    def contains(self, name: str) -> bool:
        with self._lock:
            self.load()
            return name in self.current

    def reload(self) -> None:
        """Drop the incremental cutoff and rebuild from every stored row."""
        with self._lock:
            self.last_loaded_at = None
            self.load(force=True)

    def invalidate_check(self) -> None:
        """Make the next read compare change tokens instead of trusting the TTL."""
        with self._lock:
            self.last_checked_at = None

    def is_fresh(self) -> bool:
        with self._lock:
            now = self._clock()
            if self.last_checked_at is not None and now - self.last_checked_at < self.ttl_seconds:
                return True

            token = self._token_store.read()
            if self.change_token is not None and token == self.change_token:
                self.last_checked_at = now
                return True

            logger.debug("Setting cache stale, change token {} -> {}", self.change_token, token)
            return False

    def load(self, force: bool = False) -> bool:
        """Refresh from the store unless the cache is fresh.

        Returns:
            True when the store was read
        """
        with self._lock:
            if not force and self.current and self.is_fresh():
                return False

            incremental = self.last_loaded_at is not None and bool(self.current)
            # Token read first, so a write landing during the query is seen next time
            token = self._token_store.read()

            with self._session_manager.session() as session:
                repo = SettingRepository(session)
                latest = repo.latest_updated_at()
                rows = repo.current_states(since=self.last_loaded_at if incremental else None)

            if latest is not None:
                self.last_loaded_at = min(utcnow(), latest)

            raw = dict(self.raw) if incremental else {}
            for name, state in rows:
                raw[name] = (state or {}).get("value")

            self.raw = raw
            self.current = resolve_all(raw)
            self.change_token = token
            self.last_checked_at = self._clock()

            logger.debug(
                "Setting cache loaded {} rows ({}), {} settings cached",
                len(rows),
                "incremental" if incremental else "full",
                len(self.current),
            )
            return True
