"""Unit tests for database session management and migrations.

Tests cover:
- Session manager initialization and cleanup
- Table creation and schema verification
- Transaction rollback in the session scope
"""

import pytest
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from unittest.mock import patch

from src.config import SettingsManager
from src.database import SessionManager
from src.database.migrations import verify_schema
from src.models import Setting


@pytest.mark.unit
def test_session_manager_initialization(test_db_config):
    """Test session manager initialization."""
    manager = SessionManager(connection_string=test_db_config)
    assert manager.engine is not None
    manager.close()


@pytest.mark.unit
def test_session_manager_uses_database_url_setting():
    """An explicit DATABASE_URL bypasses the PostgreSQL token path."""
    settings = SettingsManager.get_instance()
    original_url = settings.database.url
    settings.database.url = "sqlite:///:memory:"
    try:
        with patch("src.database.session.get_connection_string") as mock_conn:
            manager = SessionManager()
            assert manager.engine.url.drivername == "sqlite"
            mock_conn.assert_not_called()
            manager.close()
    finally:
        settings.database.url = original_url


@pytest.mark.unit
def test_session_manager_create_tables(test_db_config):
    """Test table creation."""
    manager = SessionManager(connection_string=test_db_config)
    manager.create_all()

    verification = verify_schema(manager)
    assert verification["status"] == "ok"
    assert SettingsManager.get_instance().storage.table_name_settings in verification["existing_tables"]

    manager.close()


@pytest.mark.unit
def test_session_context_manager(db_session):
    """Test session as context manager."""
    assert isinstance(db_session, Session)

    result = db_session.execute(text("SELECT 1")).scalar()
    assert result == 1


@pytest.mark.unit
def test_ping(session_manager):
    session_manager.ping()


@pytest.mark.unit
def test_transaction_rollback_on_error(session_manager):
    """A failing commit rolls the whole scope back."""
    with session_manager.session() as session:
        session.add(Setting(name="product_name", state_current="Helpdesk"))

    with pytest.raises(IntegrityError):
        with session_manager.session() as session:
            session.add(Setting(name="fqdn", state_current="helpdesk.example.com"))
            session.add(Setting(name="product_name", state_current="Duplicate"))

    with session_manager.session() as session:
        names = [s.name for s in session.query(Setting).all()]
    assert names == ["product_name"]


@pytest.mark.unit
def test_verify_schema_reports_missing_columns(test_db_config):
    manager = SessionManager(connection_string=test_db_config)
    table_name = SettingsManager.get_instance().storage.table_name_settings
    with manager.engine.begin() as connection:
        connection.execute(text(f"CREATE TABLE {table_name} (id INTEGER PRIMARY KEY, name VARCHAR)"))

    verification = verify_schema(manager)

    assert verification["status"] == "missing_columns"
    assert "state_current" in verification["missing_columns"][table_name]
    assert "name" not in verification["missing_columns"][table_name]
    manager.close()


@pytest.mark.unit
def test_verify_schema_reports_missing_tables(test_db_config):
    manager = SessionManager(connection_string=test_db_config)

    verification = verify_schema(manager)

    assert verification["status"] == "missing_tables"
    assert verification["existing_tables"] == []
    manager.close()
