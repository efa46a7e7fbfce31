"""Redis-backed shared cache used for the change token, dependent keys and pub/sub."""

import json
from contextlib import contextmanager
from typing import Any, Generator

from loguru import logger
from redis import Redis
from redis.client import Pipeline

from ..config import SettingsManager
from .azure_key_vault import get_secret


def create_redis_client(settings: SettingsManager | None = None) -> Redis:
    """Construct a configured Redis client instance."""
    settings = settings or SettingsManager.get_instance()
    redis = settings.redis

    password = None
    if redis.password_secret_name:
        password = get_secret(redis.password_secret_name, settings=settings)

    logger.debug("Creating Redis client (max_connections={})", redis.max_connections)
    return Redis.from_url(
        url=redis.url,
        password=password,
        socket_connect_timeout=redis.connect_timeout_seconds,
        socket_timeout=redis.socket_timeout_seconds,
        max_connections=redis.max_connections,
        decode_responses=True,
        encoding="utf-8",
    )


class RedisCache:
    """Thin wrapper over the redis-py operations this application relies on."""

    def __init__(self, client: Redis):
        self._client = client

    @classmethod
    def from_settings(cls, settings: SettingsManager | None = None) -> "RedisCache":
        return cls(create_redis_client(settings))

    def get_value(self, key: str) -> str | None:
        """Read one value by key."""
        value = self._client.get(key)
        if value is None:
            return None
        return str(value)

    def set_value(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Set one value with optional TTL in seconds."""
        if ttl_seconds is None:
            self._client.set(key, value)
            return
        self._client.set(key, value, ex=ttl_seconds)

    @contextmanager
    def pipeline(self) -> Generator[Pipeline, None, None]:
        """Batch commands on one pooled connection, released on exit."""
        with self._client.pipeline(transaction=False) as pipe:
            yield pipe

    def delete_many(self, keys: list[str]) -> int:
        """Delete several keys in one round trip; returns how many existed."""
        if not keys:
            return 0
        with self.pipeline() as pipe:
            for key in keys:
                pipe.delete(key)
            results = pipe.execute()
        return sum(int(result) for result in results)

    def publish(self, channel: str, message: dict[str, Any]) -> int:
        """Publish a JSON message; returns the number of receiving subscribers."""
        return int(self._client.publish(channel, json.dumps(message, default=str)))

    def ping(self) -> bool:
        return bool(self._client.ping())
