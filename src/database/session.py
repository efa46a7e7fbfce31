from contextlib import contextmanager
from typing import Generator

from loguru import logger
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from ..config import SettingsManager
from .base import Base
from ..services.azure_postgresql import get_connection_string


class SessionManager:
    """Manages database sessions and engine lifecycle."""

    _engine: Engine
    _session_factory: sessionmaker

    def __init__(
        self,
        connection_string: str | None = None,
        **engine_options,
    ):
        """Initialize session manager.

        Args:
            connection_string: SQLAlchemy URL; settings are used when omitted
            **engine_options: Extra keyword arguments for ``create_engine``
        """
        if connection_string:
            self._engine = create_engine(connection_string, **engine_options)
        else:
            settings = SettingsManager.get_instance()
            if settings.database.url:
                # Explicit URL, e.g. a local SQLite file
                self._engine = create_engine(
                    settings.database.url,
                    echo=settings.database.echo,
                )
            else:
                self._engine = create_engine(
                    get_connection_string(settings),
                    pool_size=settings.database.pool_size,
                    max_overflow=settings.database.max_overflow,
                    pool_pre_ping=True,
                    echo=settings.database.echo,
                )

        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        """Get the database engine."""
        return self._engine

    def create_all(self):
        """Create all tables in the database."""
        Base.metadata.create_all(self._engine)

    def ping(self) -> None:
        """Run a trivial statement to check connectivity."""
        with self.session() as session:
            session.execute(text("SELECT 1"))

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_session(self) -> Session:
        """Get a new database session."""
        return self._session_factory()

    def close(self):
        """Close the engine and cleanup resources."""
        self._engine.dispose()


# Global session manager instance
_session_manager: SessionManager | None = None


def init_session_manager(
    connection_string: str | None = None,
    **engine_options,
) -> SessionManager:
    """Initialize the global database session manager."""
    global _session_manager
    if _session_manager is not None:
        _session_manager.close()
    _session_manager = SessionManager(connection_string, **engine_options)
    logger.info("Session manager initialized ({})", _session_manager.engine.url.drivername)
    return _session_manager


def get_session_manager() -> SessionManager:
    """Get the global session manager instance."""
    if _session_manager is None:
        raise RuntimeError(
            "Database not initialized. Call init_session_manager() first or set environment variables."
        )
    return _session_manager
