"""Pytest configuration and shared test fixtures.

Responsibilities:
- Provide database fixtures with in-memory SQLite
- Provide a setting service wired to a fake Redis client and a fake clock
- Configure logging for tests
"""

import sys

import pytest
from loguru import logger
from sqlalchemy.pool import StaticPool

from src.config import EvictionFailurePolicy
from src.database import SessionManager
from src.database.migrations import init_database
from src.services import AppVersionMarker, RedisCache
from src.setting import (
    ChangeTokenStore,
    LocalBroadcastNotifier,
    SettingCache,
    SettingService,
)

from .test_utilities import FakeClock, FakeRedisClient


@pytest.fixture(scope="session")
def test_db_config():
    """Database configuration for testing (SQLite in-memory)."""
    return "sqlite:///:memory:"


@pytest.fixture(scope="function")
def session_manager(test_db_config):
    """Provide a session manager over a fresh in-memory database.

    Every session shares one connection so all of them see the same tables.
    """
    manager = SessionManager(
        connection_string=test_db_config,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_database(manager)

    try:
        yield manager
    finally:
        manager.close()


@pytest.fixture(scope="function")
def db_session(session_manager):
    """Provide a database session for testing."""
    session = session_manager.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_redis():
    return FakeRedisClient()


@pytest.fixture
def redis_cache(fake_redis):
    return RedisCache(fake_redis)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return LocalBroadcastNotifier()


@pytest.fixture
def token_store(redis_cache):
    return ChangeTokenStore(redis_cache)


@pytest.fixture
def setting_cache(session_manager, token_store, clock):
    return SettingCache(session_manager, token_store, ttl_seconds=15, clock=clock)


@pytest.fixture
def setting_service(session_manager, setting_cache, token_store, notifier, redis_cache):
    return SettingService(
        session_manager=session_manager,
        cache=setting_cache,
        token_store=token_store,
        notifier=notifier,
        external_cache=redis_cache,
        app_version=AppVersionMarker(redis_cache, notifier),
        eviction_failure_policy=EvictionFailurePolicy.LOG,
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Configure logging for tests."""
    # Remove default handlers
    logger.remove()

    # Add test-specific handler with appropriate level
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )

    yield

    # Cleanup
    logger.remove()
