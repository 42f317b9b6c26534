"""Base repository pattern implementation.

This module provides a generic async repository that routes every storage
call through the bounded retry in ``taekwondo_api.db.retry``. Domain
routes use it directly or subclass it for custom queries.
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.db.retry import run_with_retry

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Generic repository with common CRUD operations.

    Writes replay the whole unit of work on retry (add/assign + commit), since
    a rolled back session forgets pending changes.

    Example:
        ```python
        class UserRepository(BaseRepository[User]):
            def __init__(self, db: AsyncSession):
                super().__init__(db, User)

            async def find_by_email(self, email: str) -> User | None:
                return await self.first(User.email == email)
        ```
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]):
        """Initialize repository with database session and model class.

        Args:
            db: SQLAlchemy async session.
            model: The model class this repository operates on.
        """
        self.db = db
        self.model = model
        self.name = getattr(model, "__tablename__", model.__name__)

    async def get_by_id(self, entity_id: UUID) -> ModelType | None:
        """Get a single entity by ID.

        Args:
            entity_id: The UUID of the entity.

        Returns:
            The entity if found, None otherwise.
        """
        return await run_with_retry(
            self.db,
            lambda: self.db.get(self.model, entity_id),
            description=f"get {self.name}",
        )

    async def first(self, *criteria: ColumnElement[bool]) -> ModelType | None:
        stmt = select(self.model).where(*criteria).limit(1)

        async def query() -> ModelType | None:
            result = await self.db.scalars(stmt)
            return result.first()

        return await run_with_retry(self.db, query, description=f"find {self.name}")

    async def find_all(
        self,
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        skip: int = 0,
        limit: int | None = None,
        options: Sequence[Any] = (),
    ) -> list[ModelType]:
        """List entities matching ``criteria``.

        Args:
            criteria: SQLAlchemy filter expressions.
            order_by: Columns or ordering expressions.
            skip: Number of records to skip.
            limit: Maximum number of records to return.
            options: Loader options such as ``selectinload``.

        Returns:
            List of entities.
        """
        stmt = select(self.model).where(*criteria).order_by(*order_by).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        if options:
            stmt = stmt.options(*options)

        async def query() -> list[ModelType]:
            result = await self.db.scalars(stmt)
            return list(result.all())

        return await run_with_retry(self.db, query, description=f"list {self.name}")

    async def add(self, instance: ModelType) -> ModelType:
        """Insert a new entity.

        Args:
            instance: The transient entity.

        Returns:
            The persisted entity, refreshed from the database.
        """

        async def write() -> None:
            self.db.add(instance)
            await self.db.commit()
            await self.db.refresh(instance)

        await run_with_retry(self.db, write, description=f"create {self.name}")
        return instance

    async def update(self, instance: ModelType, **changes: Any) -> ModelType:
        """Apply ``changes`` to an existing entity and persist them.

        Args:
            instance: The entity to update.
            **changes: Attributes to update.

        Returns:
            The updated entity.
        """

        async def write() -> None:
            for key, value in changes.items():
                # Checked on the class: after a rolled back attempt the instance is expired
                if hasattr(type(instance), key):
                    setattr(instance, key, value)
            await self.db.commit()
            await self.db.refresh(instance)

        await run_with_retry(self.db, write, description=f"update {self.name}")
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Delete an entity.

        Args:
            instance: The entity to delete.
        """

        async def write() -> None:
            await self.db.delete(instance)
            await self.db.commit()

        await run_with_retry(self.db, write, description=f"delete {self.name}")
