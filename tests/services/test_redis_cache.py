"""Unit tests for the Redis cache wrapper.

Tests cover:
- Value get/set with and without TTL
- Batched deletes through a pipeline
- JSON publishing
- Client construction from settings
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.services import RedisCache, create_redis_client


@pytest.mark.unit
def test_set_and_get_value(redis_cache, fake_redis):
    redis_cache.set_value("product_name", "Helpdesk")
    redis_cache.set_value("Setting::ChangeId", "abc", ttl_seconds=86400)

    assert redis_cache.get_value("product_name") == "Helpdesk"
    assert redis_cache.get_value("missing") is None
    assert fake_redis.expiries == {"product_name": None, "Setting::ChangeId": 86400}


@pytest.mark.unit
def test_delete_many_counts_existing(redis_cache, fake_redis):
    fake_redis.values.update({"a": "1", "b": "2"})

    assert redis_cache.delete_many(["a", "b", "c"]) == 2
    assert fake_redis.values == {}
    assert redis_cache.delete_many([]) == 0


@pytest.mark.unit
def test_delete_many_propagates_connection_errors(redis_cache, fake_redis):
    fake_redis.values["a"] = "1"
    fake_redis.fail_deletes = True

    with pytest.raises(RedisConnectionError):
        redis_cache.delete_many(["a"])
    assert fake_redis.values == {"a": "1"}


@pytest.mark.unit
def test_publish_serializes_json(redis_cache, fake_redis):
    receivers = redis_cache.publish("sessions:public", {"event": "config_update", "data": {"value": [1, 2]}})

    assert receivers == 1
    channel, message = fake_redis.published[0]
    assert channel == "sessions:public"
    assert json.loads(message) == {"event": "config_update", "data": {"value": [1, 2]}}


@pytest.mark.unit
def test_ping(redis_cache):
    assert redis_cache.ping() is True


@pytest.mark.unit
def test_create_redis_client_without_password():
    settings = MagicMock()
    settings.redis.url = "redis://localhost:6379/0"
    settings.redis.password_secret_name = ""
    settings.redis.connect_timeout_seconds = 2.0
    settings.redis.socket_timeout_seconds = 2.0
    settings.redis.max_connections = 10

    with patch("src.services.redis_cache.Redis.from_url") as mock_from_url, \
            patch("src.services.redis_cache.get_secret") as mock_get_secret:
        create_redis_client(settings)

    mock_get_secret.assert_not_called()
    kwargs = mock_from_url.call_args.kwargs
    assert kwargs["url"] == "redis://localhost:6379/0"
    assert kwargs["password"] is None
    assert kwargs["decode_responses"] is True
    assert kwargs["max_connections"] == 10


@pytest.mark.unit
def test_create_redis_client_reads_password_from_key_vault():
    settings = MagicMock()
    settings.redis.url = "rediss://cache.example.net:6380/0"
    settings.redis.password_secret_name = "redis-password"

    with patch("src.services.redis_cache.Redis.from_url") as mock_from_url, \
            patch("src.services.redis_cache.get_secret", return_value="s3cret") as mock_get_secret:
        create_redis_client(settings)

    mock_get_secret.assert_called_once_with("redis-password", settings=settings)
    assert mock_from_url.call_args.kwargs["password"] == "s3cret"


@pytest.mark.unit
def test_from_settings_wraps_client():
    client = MagicMock()
    with patch("src.services.redis_cache.create_redis_client", return_value=client):
        cache = RedisCache.from_settings()

    client.get.return_value = "x"
    assert cache.get_value("key") == "x"
