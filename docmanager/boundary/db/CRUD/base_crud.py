"""
Base CRUD operations for SQLAlchemy models.

Generic insert, primary-key lookup and guarded UPDATE ... RETURNING
shared by the job and document CRUD classes.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from docmanager.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Methods flush but never commit; the caller owns the transaction.

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **fields: Any) -> ModelT:
        """
        Insert a row and reload it so server-side defaults are populated.

        Args:
            session: Async database session
            **fields: Column values

        Returns:
            Persisted model instance
        """
        instance = self.model(**fields)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update_where(
        self,
        session: AsyncSession,
        conditions: list[ColumnElement[bool]],
        **values: Any,
    ) -> ModelT | None:
        """
        Apply ``values`` to the single row matching every condition.

        Matching and writing happen in one UPDATE statement.

        Args:
            session: Async database session
            conditions: WHERE clauses, expected to pin at most one row
            **values: Column values (SQL expressions allowed)

        Returns:
            Updated row, or None when nothing matched
        """
        stmt = (
            update(self.model)
            .where(*conditions)
            .values(**values)
            .returning(self.model)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_by_id(self, session: AsyncSession, id: UUID, **values: Any) -> ModelT | None:
        return await self.update_where(session, [self.model.id == id], **values)
