import uuid

from loguru import logger

from ..services.redis_cache import RedisCache

DEFAULT_KEY = "Setting::ChangeId"
DEFAULT_EXPIRY_SECONDS = 24 * 60 * 60


class ChangeTokenStore:
    """Shared generation marker; any setting write replaces it."""

    def __init__(
        self,
        cache: RedisCache,
        key: str = DEFAULT_KEY,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
    ):
        self._cache = cache
        self.key = key
        self.expiry_seconds = expiry_seconds

    def read(self) -> str | None:
        return self._cache.get_value(self.key)

    def regenerate(self) -> str:
        """Store a fresh unique token and return it."""
        token = str(uuid.uuid4())
        logger.debug("Setting change token regenerated: {}", token)
        self._cache.set_value(self.key, token, ttl_seconds=self.expiry_seconds)
        return token
