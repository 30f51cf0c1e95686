"""
Base CRUD operations for SQLAlchemy models.

Provides generic create, read and update operations that can be
inherited and extended by model-specific CRUD classes. Primary keys are
read from the model mapper, so integer and composite keys both work.

Dependencies: sqlalchemy
System role: Foundation for all ORM CRUD operations
"""

from typing import Any, Generic, Iterable, Sequence, TypeVar

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Provides standard database operations that work with any SQLAlchemy model.
    Subclasses specify the model class and add model-specific lookups.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        """
        Initialize CRUD with target model.

        Args:
            model: SQLAlchemy model class for database operations
        """
        self.model = model

    @property
    def primary_key(self):
        """First primary key column of the model."""
        return inspect(self.model).primary_key[0]

    def _conditions(self, filters: dict[str, Any]) -> list:
        conditions = []
        for name, value in filters.items():
            attr = getattr(self.model, name)
            conditions.append(attr.is_(None) if value is None else attr == value)
        return conditions

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Create a new record in the database.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated key and defaults
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_pk(self, session: AsyncSession, pk: Any) -> ModelT | None:
        """
        Retrieve a single record by primary key.

        Args:
            session: Async database session
            pk: Primary key value (tuple for composite keys)

        Returns:
            Model instance if found, None otherwise
        """
        return await session.get(self.model, pk)

    async def get_all(
        self,
        session: AsyncSession,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ModelT]:
        """
        Retrieve all records ordered by primary key, with optional pagination.

        Args:
            session: Async database session
            limit: Maximum number of records to return (None for all)
            offset: Number of records to skip

        Returns:
            Sequence of model instances
        """
        stmt = select(self.model).order_by(self.primary_key).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def find_one(self, session: AsyncSession, **filters) -> ModelT | None:
        """
        Retrieve the first record matching equality filters.

        None filter values match NULL columns.
        """
        stmt = select(self.model).where(*self._conditions(filters)).limit(1)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def find_all(self, session: AsyncSession, **filters) -> Sequence[ModelT]:
        """Retrieve every record matching equality filters."""
        stmt = select(self.model).where(*self._conditions(filters))
        result = await session.execute(stmt)
        return result.scalars().all()

    async def find_in(
        self,
        session: AsyncSession,
        field: str,
        values: Iterable[Any],
    ) -> Sequence[ModelT]:
        """
        Retrieve records whose field is one of values.

        Args:
            session: Async database session
            field: Model attribute name
            values: Accepted values (empty -> no query, empty result)
        """
        values = list(values)
        if not values:
            return []
        stmt = select(self.model).where(getattr(self.model, field).in_(values))
        result = await session.execute(stmt)
        return result.scalars().all()

    async def update_by_pk(
        self,
        session: AsyncSession,
        pk: Any,
        **kwargs,
    ) -> ModelT | None:
        """
        Update a record by primary key.

        Args:
            session: Async database session
            pk: Primary key value
            **kwargs: Fields to update with new values

        Returns:
            Updated model instance if found, None otherwise
        """
        instance = await self.get_by_pk(session, pk)
        if instance is None:
            return None
        for name, value in kwargs.items():
            setattr(instance, name, value)
        await session.flush()
        return instance
