from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models import Setting
from .base import BaseRepository


class SettingRepository(BaseRepository[Setting]):
    """Repository for Setting operations."""

    def __init__(self, session: Session):
        super().__init__(Setting, session)

    def get_by_name(self, name: str) -> Setting | None:
        """Get setting by name."""
        return self.get_one_by(name=name)

    def latest_updated_at(self) -> datetime | None:
        """Most recent ``updated_at`` across all settings."""
        stmt = select(func.max(Setting.updated_at))
        return self.session.execute(stmt).scalar_one_or_none()

    def current_states(self, since: datetime | None = None) -> list[tuple[str, dict]]:
        """``(name, state_current)`` pairs ordered by id.

        Args:
            since: Only rows with ``updated_at >= since`` when given
        """
        stmt = select(Setting.name, Setting.state_current).order_by(Setting.id)
        if since is not None:
            stmt = stmt.where(Setting.updated_at >= since)
        return [(name, state) for name, state in self.session.execute(stmt).all()]

    def create_setting(
        self,
        name: str,
        state: Any = None,
        title: str | None = None,
        area: str | None = None,
        description: str | None = None,
        options: dict | None = None,
        preferences: dict | None = None,
        frontend: bool = False,
    ) -> Setting:
        """Insert a setting; its initial state is the given state."""
        return self.create(
            name=name,
            title=title,
            area=area,
            description=description,
            options=options or {},
            state_current=state,
            preferences=preferences or {},
            frontend=frontend,
        )
