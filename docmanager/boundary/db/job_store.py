"""
SQLAlchemy-backed ingestion job store.

Implements the JobStore protocol over IngestionJobCRUD. Each operation runs
in its own session and transaction; SQLAlchemy errors are rolled back,
logged, and re-raised as StoreError.

Dependencies: sqlalchemy, docmanager.boundary.db.CRUD, docmanager.core
System role: Durable source of truth for ingestion jobs
"""

import logging
import uuid
from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docmanager.boundary.db.base import as_utc
from docmanager.boundary.db.CRUD.job_crud import ingestion_job_crud
from docmanager.boundary.db.models.job_model import IngestionJobModel
from docmanager.core.exceptions import StoreError
from docmanager.core.ingestion.models import (
    IngestionJob,
    IngestionStatus,
    IngestionType,
    JobFilters,
)

logger = logging.getLogger(__name__)


def job_from_model(model: IngestionJobModel) -> IngestionJob:
    """Convert an ORM row into the domain snapshot."""
    return IngestionJob(
        id=model.id,
        ingestion_type=IngestionType(model.ingestion_type),
        status=IngestionStatus(model.status),
        name=model.name,
        description=model.description,
        document_id=model.document_id,
        document_ids=[uuid.UUID(str(value)) for value in (model.document_ids or [])],
        configuration=dict(model.configuration or {}),
        result=model.result,
        error_message=model.error_message,
        progress=model.progress,
        retry_count=model.retry_count,
        max_retries=model.max_retries,
        started_at=as_utc(model.started_at),
        completed_at=as_utc(model.completed_at),
        triggered_by=model.triggered_by,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
        version=model.version,
    )


class SqlJobStore:
    """JobStore backed by the ingestion_jobs table."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """
        Initialize job store.

        Args:
            session_factory: Async session factory bound to the application engine
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str, **context: Any) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(
                    "Job store operation failed",
                    extra={
                        "operation": operation,
                        "error_type": type(e).__name__,
                        "error": str(e),
                        **{key: str(value) for key, value in context.items()},
                    },
                )
                raise StoreError(
                    f"Job store {operation} failed: {type(e).__name__}",
                    operation=operation,
                ) from e

    async def create(self, job: IngestionJob) -> IngestionJob:
        async with self._transaction("create", job_id=job.id) as session:
            model = await ingestion_job_crud.create(
                session,
                id=job.id,
                ingestion_type=job.ingestion_type,
                status=job.status,
                name=job.name,
                description=job.description,
                document_id=job.document_id,
                document_ids=[str(value) for value in job.document_ids],
                configuration=dict(job.configuration),
                result=job.result,
                error_message=job.error_message,
                progress=job.progress,
                retry_count=job.retry_count,
                max_retries=job.max_retries,
                started_at=job.started_at,
                completed_at=job.completed_at,
                triggered_by=job.triggered_by,
                version=job.version,
            )
            saved = job_from_model(model)
        return saved

    async def get(self, job_id: uuid.UUID) -> IngestionJob | None:
        async with self._transaction("get", job_id=job_id) as session:
            model = await ingestion_job_crud.get_by_id(session, job_id)
            job = job_from_model(model) if model is not None else None
        return job

    async def transition(
        self,
        job_id: uuid.UUID,
        expected_statuses: Collection[IngestionStatus],
        expected_version: int | None = None,
        **changes: Any,
    ) -> IngestionJob | None:
        async with self._transaction("transition", job_id=job_id) as session:
            model = await ingestion_job_crud.conditional_update(
                session,
                job_id,
                expected_statuses,
                expected_version=expected_version,
                **changes,
            )
            job = job_from_model(model) if model is not None else None

        if job is None:
            logger.debug(
                "Conditional write did not match",
                extra={
                    "job_id": str(job_id),
                    "expected_statuses": sorted(s.value for s in expected_statuses),
                    "expected_version": expected_version,
                },
            )
        return job

    async def query(
        self, filters: JobFilters, offset: int, limit: int
    ) -> tuple[list[IngestionJob], int]:
        async with self._transaction("query") as session:
            models, total = await ingestion_job_crud.get_page(session, filters, offset, limit)
            jobs = [job_from_model(model) for model in models]
        return jobs, total

    async def count_by_status(self) -> dict[IngestionStatus, int]:
        async with self._transaction("count_by_status") as session:
            counts = await ingestion_job_crud.count_by_status(session)
        return counts

    async def count_by_type(self) -> dict[IngestionType, int]:
        async with self._transaction("count_by_type") as session:
            counts = await ingestion_job_crud.count_by_type(session)
        return counts

    async def completed_durations(self) -> list[float]:
        async with self._transaction("completed_durations") as session:
            rows = await ingestion_job_crud.get_completed_timestamps(session)
        return [
            (as_utc(completed_at) - as_utc(started_at)).total_seconds()
            for started_at, completed_at in rows
        ]

    async def find_stale_processing(self, started_before: datetime) -> list[IngestionJob]:
        async with self._transaction("find_stale_processing") as session:
            models = await ingestion_job_crud.get_processing_started_before(
                session, started_before
            )
            jobs = [job_from_model(model) for model in models]
        return jobs
