"""Base repository with common write operations.

Generic create and update helpers for SQLAlchemy models with
async support.

Usage:
    from hrbridge.db.repositories.base import BaseRepository

    class EmployeeRepository(BaseRepository[Employee, int]):
        pass

    repo = EmployeeRepository(db_session)
    employee = await repo.get_by_provider_and_employee_id("provider1", "EMP001")
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from hrbridge.db.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
PKType = TypeVar("PKType", bound=int | str)


class BaseRepository(Generic[ModelType, PKType]):
    """Generic repository for SQLAlchemy models.

    Shared write operations with async support. Subclass to add
    model-specific methods.

    Write methods commit by default. Pass ``commit=False`` inside an
    enclosing transaction; the change is then flushed and refreshed so
    server-generated columns are loaded.

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

    async def create(self, obj: ModelType, *, commit: bool = True) -> ModelType:
        """Create a new record.

        Args:
            obj: Model instance to create
            commit: Whether to commit the transaction

        Returns:
            Created model instance
        """
        self.db.add(obj)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(
        self, obj: ModelType, updates: dict[str, Any], *, commit: bool = True
    ) -> ModelType:
        """Update a record with given values.

        Keys that are not attributes of the model are ignored.

        Args:
            obj: Model instance to update
            updates: Dictionary of field: value to update
            commit: Whether to commit the transaction

        Returns:
            Updated model instance
        """
        for field, value in updates.items():
            if hasattr(obj, field):
                setattr(obj, field, value)

        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        await self.db.refresh(obj)
        return obj
