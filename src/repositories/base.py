from typing import Any, Generic, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from ..database.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository providing common query operations."""

    def __init__(self, model: Type[ModelType], session: Session):
        """Initialize repository.

        Args:
            model: The SQLAlchemy model class
            session: Database session
        """
        self.model = model
        self.session = session

    def _where(self, stmt: Select, filters: dict[str, Any]) -> Select:
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter field: {key}")
            stmt = stmt.where(getattr(self.model, key) == value)
        return stmt

    def create(self, **fields) -> ModelType:
        """Add a new entity and flush so defaults and the id are populated."""
        instance = self.model(**fields)
        self.session.add(instance)
        self.session.flush()
        return instance

    def get_all(self, limit: int | None = None, offset: int = 0) -> list[ModelType]:
        """All entities in primary key order, with optional pagination."""
        stmt = select(self.model).order_by(*self.model.__table__.primary_key.columns).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def get_by(self, **filters) -> list[ModelType]:
        """Entities whose columns equal the given values."""
        stmt = self._where(select(self.model), filters)
        return list(self.session.execute(stmt).scalars().all())

    def get_one_by(self, **filters) -> ModelType | None:
        stmt = self._where(select(self.model), filters).limit(1)
        return self.session.execute(stmt).scalars().first()

    def count(self, **filters) -> int:
        stmt = self._where(select(func.count()).select_from(self.model), filters)
        return int(self.session.execute(stmt).scalar_one())

    def exists(self, **filters) -> bool:
        return self.count(**filters) > 0
