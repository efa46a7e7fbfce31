from loguru import logger
from sqlalchemy import inspect

from .base import Base
from .session import SessionManager, get_session_manager


def _register_models() -> None:
    # Importing the models registers their tables on Base.metadata
    from .. import models  # noqa: F401


def init_database(session_manager: SessionManager | None = None) -> None:
    """Create missing tables. Existing tables are left untouched.

    Usage:
        from src.database import init_session_manager, init_database
        init_database(init_session_manager())
    """
    session_manager = session_manager or get_session_manager()
    _register_models()

    logger.info("Initializing database schema...")
    session_manager.create_all()
    logger.info("Database schema initialized successfully")


def verify_schema(session_manager: SessionManager | None = None) -> dict:
    """Compare the mapped tables and columns with what the database holds.

    Returns:
        Dictionary with verification results:
        {
            'status': 'ok' | 'missing_tables' | 'missing_columns' | 'error',
            'expected_tables': sorted mapped table names,
            'existing_tables': sorted table names found in the database,
            'missing_tables': mapped tables absent from the database,
            'missing_columns': {table: [column, ...]} for tables that exist
        }
    """
    session_manager = session_manager or get_session_manager()
    _register_models()
    expected_tables = set(Base.metadata.tables.keys())

    try:
        inspector = inspect(session_manager.engine)
        existing_tables = set(inspector.get_table_names())
        missing_tables = expected_tables - existing_tables

        missing_columns = {}
        for table_name in sorted(expected_tables & existing_tables):
            existing_columns = {column["name"] for column in inspector.get_columns(table_name)}
            absent = [
                column.name
                for column in Base.metadata.tables[table_name].columns
                if column.name not in existing_columns
            ]
            if absent:
                missing_columns[table_name] = absent
    except Exception as e:
        logger.error("Error verifying schema: {}", e)
        return {
            'status': 'error',
            'error': str(e),
            'expected_tables': sorted(expected_tables),
            'existing_tables': [],
            'missing_tables': [],
            'missing_columns': {},
        }

    if missing_tables:
        status = 'missing_tables'
        logger.warning("Missing tables in database: {}", missing_tables)
    elif missing_columns:
        status = 'missing_columns'
        logger.warning("Missing columns in database: {}", missing_columns)
    else:
        status = 'ok'
        logger.info("Database schema verification passed")

    return {
        'status': status,
        'expected_tables': sorted(expected_tables),
        'existing_tables': sorted(existing_tables),
        'missing_tables': sorted(missing_tables),
        'missing_columns': missing_columns,
    }
