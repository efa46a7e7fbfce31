import copy
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, validates

from ..config import SettingsManager
from ..database.base import Base, utcnow

_settings = SettingsManager.get_instance()


def wrap_state(state: Any) -> dict:
    """Return ``state`` in its stored ``{"value": ...}`` shape.

    A dict that already carries a ``value`` key is taken as wrapped.
    """
    if isinstance(state, dict) and "value" in state:
        return state
    return {"value": state}


class Setting(Base):
    """Named configuration value with its default and current state."""

    __tablename__ = _settings.storage.table_name_settings

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)

    name: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    area: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    options: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    state_current: Mapped[dict] = mapped_column(JSON, nullable=False)
    state_initial: Mapped[dict] = mapped_column(JSON, nullable=False)
    preferences: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    frontend: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False, index=True
    )

    @validates("state_current")
    def _wrap_state_current(self, key: str, state: Any) -> dict:
        return wrap_state(state)

    @property
    def value(self) -> Any:
        """Unwrapped current value."""
        return (self.state_current or {}).get("value")

    @property
    def initial_value(self) -> Any:
        """Unwrapped default value."""
        return (self.state_initial or {}).get("value")

    @property
    def cache_keys(self) -> list[str]:
        """External cache keys to evict when this setting changes."""
        keys = (self.preferences or {}).get("cache")
        if not keys:
            return []
        if isinstance(keys, str):
            return [keys]
        return list(keys)

    @property
    def requires_authentication(self) -> bool:
        return bool((self.preferences or {}).get("authentication"))

    def __repr__(self) -> str:
        return f"<Setting(name='{self.name}', id='{self.id}', frontend={self.frontend})>"


@event.listens_for(Setting, "before_insert")
def _set_initial_state(mapper, connection, target: Setting) -> None:
    # Default state is taken once, from whatever the row holds on first insert
    if target.state_current is None:
        target.state_current = wrap_state(None)
    target.state_initial = copy.deepcopy(target.state_current)
