"""
Ingestion job CRUD operations.

Extends BaseCRUD with the conditional status update used for every
lifecycle transition, filtered paging, and aggregate queries for stats
and stale-job recovery.

Dependencies: sqlalchemy, docmanager.boundary.db.models.job_model
System role: Ingestion job persistence operations
"""

from collections.abc import Collection
from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from docmanager.boundary.db.base import utcnow
from docmanager.boundary.db.CRUD.base_crud import BaseCRUD
from docmanager.boundary.db.models.job_model import IngestionJobModel
from docmanager.core.ingestion.models import IngestionStatus, IngestionType, JobFilters


class IngestionJobCRUD(BaseCRUD[IngestionJobModel]):
    """CRUD operations for IngestionJobModel."""

    def __init__(self) -> None:
        """Initialize IngestionJobCRUD with IngestionJobModel."""
        super().__init__(IngestionJobModel)

    async def conditional_update(
        self,
        session: AsyncSession,
        id: UUID,
        expected_statuses: Collection[IngestionStatus],
        expected_version: int | None = None,
        **changes: Any,
    ) -> IngestionJobModel | None:
        """
        Update a job only if its status (and version) still match.

        The guard is part of the UPDATE's WHERE clause, so check-and-write is
        a single statement. version is bumped on every successful write.

        Args:
            session: Async database session
            id: Job UUID
            expected_statuses: Statuses the job must currently be in
            expected_version: Version the job must currently have (optional)
            **changes: Column values to set

        Returns:
            Updated IngestionJobModel, or None if the guard did not match
        """
        conditions = [
            IngestionJobModel.id == id,
            IngestionJobModel.status.in_(list(expected_statuses)),
        ]
        if expected_version is not None:
            conditions.append(IngestionJobModel.version == expected_version)

        return await self.update_where(
            session,
            conditions,
            **changes,
            version=IngestionJobModel.version + 1,
            updated_at=utcnow(),
        )

    def _filter_conditions(self, filters: JobFilters) -> list:
        conditions = []
        if filters.status is not None:
            conditions.append(IngestionJobModel.status == filters.status)
        if filters.ingestion_type is not None:
            conditions.append(IngestionJobModel.ingestion_type == filters.ingestion_type)
        if filters.triggered_by is not None:
            conditions.append(IngestionJobModel.triggered_by == filters.triggered_by)
        return conditions

    async def get_page(
        self,
        session: AsyncSession,
        filters: JobFilters,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[IngestionJobModel], int]:
        """
        Retrieve one page of jobs, newest first, with the total match count.

        Args:
            session: Async database session
            filters: Optional status/type/triggered_by filters
            offset: Number of jobs to skip
            limit: Maximum number of jobs to return

        Returns:
            Tuple of (jobs on this page, total matching jobs)
        """
        conditions = self._filter_conditions(filters)

        count_stmt = select(func.count()).select_from(IngestionJobModel).where(*conditions)
        total = (await session.execute(count_stmt)).scalar_one()

        stmt = (
            select(IngestionJobModel)
            .where(*conditions)
            .order_by(IngestionJobModel.created_at.desc(), IngestionJobModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all(), total

    async def count_by_status(self, session: AsyncSession) -> dict[IngestionStatus, int]:
        stmt = select(IngestionJobModel.status, func.count()).group_by(IngestionJobModel.status)
        result = await session.execute(stmt)
        return {IngestionStatus(status): count for status, count in result.all()}

    async def count_by_type(self, session: AsyncSession) -> dict[IngestionType, int]:
        stmt = select(IngestionJobModel.ingestion_type, func.count()).group_by(
            IngestionJobModel.ingestion_type
        )
        result = await session.execute(stmt)
        return {IngestionType(kind): count for kind, count in result.all()}

    async def get_completed_timestamps(
        self, session: AsyncSession
    ) -> Sequence[tuple[datetime, datetime]]:
        """
        (started_at, completed_at) of COMPLETED jobs carrying both timestamps.

        Durations are computed by the caller so the query stays portable
        across PostgreSQL and sqlite.
        """
        stmt = select(IngestionJobModel.started_at, IngestionJobModel.completed_at).where(
            IngestionJobModel.status == IngestionStatus.COMPLETED,
            IngestionJobModel.started_at.is_not(None),
            IngestionJobModel.completed_at.is_not(None),
        )
        result = await session.execute(stmt)
        return [tuple(row) for row in result.all()]

    async def get_processing_started_before(
        self,
        session: AsyncSession,
        cutoff: datetime,
    ) -> Sequence[IngestionJobModel]:
        """
        Retrieve PROCESSING jobs whose started_at is older than ``cutoff``.

        Args:
            session: Async database session
            cutoff: started_at upper bound (exclusive)

        Returns:
            Sequence of stale IngestionJobModels, oldest first
        """
        stmt = (
            select(IngestionJobModel)
            .where(
                IngestionJobModel.status == IngestionStatus.PROCESSING,
                IngestionJobModel.started_at < cutoff,
            )
            .order_by(IngestionJobModel.started_at.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()


ingestion_job_crud = IngestionJobCRUD()
