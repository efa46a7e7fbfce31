from datetime import datetime, timezone

from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all database models."""

    def to_dict(self) -> dict:
        mapper = inspect(self).mapper
        return {column.key: getattr(self, column.key) for column in mapper.columns}
