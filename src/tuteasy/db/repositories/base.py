"""Base repository with common query helpers.

Provides a generic repository pattern for SQLAlchemy models with
async support.

Usage:
    from tuteasy.db.repositories.base import BaseRepository

    class TutorRepository(BaseRepository[Tutor, UUID]):
        pass

    repo = TutorRepository(db_session)
    total = await repo.count(predicate)
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from tuteasy.db.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
PKType = TypeVar("PKType", bound=UUID | int | str)


class BaseRepository(Generic[ModelType, PKType]):
    """Generic repository for SQLAlchemy models.

    Type Parameters:
        ModelType: The SQLAlchemy model class
        PKType: The type of the primary key (UUID, int, or str)

    Attributes:
        model: The model class
        db: The database session
    """

    model: type[ModelType]

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    def __init_subclass__(cls, **kwargs):
        """Extract model type from generic parameter."""
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", []):
            args = getattr(base, "__args__", None)
            if args and len(args) >= 1:
                first_arg = args[0]
                if isinstance(first_arg, type) and issubclass(first_arg, Base):
                    cls.model = first_arg
                    break

    async def _all(self, stmt: Select) -> list[Any]:
        """Execute a statement and return the first column of every row."""
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _scalar(self, stmt: Select) -> Any:
        """Execute a statement and return a single scalar (None when no row)."""
        result = await self.db.execute(stmt)
        return result.scalar()

    def _get_pk_column(self):
        """Get the primary key column for this model.

        Returns:
            The primary key column

        Raises:
            ValueError: If no primary key found
        """
        mapper = self.model.__mapper__
        pk_cols = mapper.primary_key
        if not pk_cols:
            raise ValueError(f"No primary key found for {self.model.__name__}")
        return pk_cols[0]
