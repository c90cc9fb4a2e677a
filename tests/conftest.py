"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory fakes for the job store, document gateway and processing
client, a controllable clock, and an in-memory SQLite async database.
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import asyncio
import dataclasses
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from docmanager.core.documents import DocumentMeta, DocumentStatus
from docmanager.core.exceptions import DocumentNotFoundError
from docmanager.core.ingestion.job_manager import IngestionJobManager
from docmanager.core.ingestion.models import (
    IngestionJob,
    IngestionStatus,
    IngestionType,
    JobFilters,
)
from docmanager.core.ingestion.scheduler import DispatchScheduler


class FakeClock:
    """Deterministic UTC clock advanced by hand."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class InMemoryJobStore:
    """JobStore fake with the same conditional-write semantics as SqlJobStore."""

    def __init__(self, clock: FakeClock) -> None:
        self.jobs: dict[uuid.UUID, IngestionJob] = {}
        self.clock = clock
        self.transition_calls: list[dict[str, Any]] = []

    async def create(self, job: IngestionJob) -> IngestionJob:
        saved = dataclasses.replace(job, created_at=self.clock(), updated_at=self.clock())
        self.jobs[saved.id] = saved
        return dataclasses.replace(saved)

    async def get(self, job_id: uuid.UUID) -> IngestionJob | None:
        job = self.jobs.get(job_id)
        return dataclasses.replace(job) if job else None

    async def transition(self, job_id, expected_statuses, expected_version=None, **changes):
        self.transition_calls.append({"job_id": job_id, **changes})
        job = self.jobs.get(job_id)
        if job is None or job.status not in set(expected_statuses):
            return None
        if expected_version is not None and job.version != expected_version:
            return None
        updated = dataclasses.replace(
            job, **changes, version=job.version + 1, updated_at=self.clock()
        )
        self.jobs[job_id] = updated
        return dataclasses.replace(updated)

    async def query(self, filters: JobFilters, offset: int, limit: int):
        matching = [
            job
            for job in self.jobs.values()
            if (filters.status is None or job.status == filters.status)
            and (filters.ingestion_type is None or job.ingestion_type == filters.ingestion_type)
            and (filters.triggered_by is None or job.triggered_by == filters.triggered_by)
        ]
        matching.sort(key=lambda job: job.created_at, reverse=True)
        return matching[offset : offset + limit], len(matching)

    async def count_by_status(self):
        counts: dict[IngestionStatus, int] = {}
        for job in self.jobs.values():
            counts[job.status] = counts.get(job.status, 0) + 1
        return counts

    async def count_by_type(self):
        counts: dict[IngestionType, int] = {}
        for job in self.jobs.values():
            counts[job.ingestion_type] = counts.get(job.ingestion_type, 0) + 1
        return counts

    async def completed_durations(self):
        return [
            job.duration.total_seconds()
            for job in self.jobs.values()
            if job.status == IngestionStatus.COMPLETED and job.duration is not None
        ]

    async def find_stale_processing(self, started_before):
        return [
            dataclasses.replace(job)
            for job in self.jobs.values()
            if job.status == IngestionStatus.PROCESSING
            and job.started_at is not None
            and job.started_at < started_before
        ]


class FakeGateway:
    """DocumentStatusGateway fake recording every mirrored status."""

    def __init__(self) -> None:
        self.documents: dict[uuid.UUID, DocumentMeta] = {}
        self.status_updates: list[tuple[uuid.UUID, DocumentStatus]] = []
        self.fail_set_status = False

    def add_document(self, title: str = "Report") -> uuid.UUID:
        document_id = uuid.uuid4()
        self.documents[document_id] = DocumentMeta(
            id=document_id,
            title=title,
            file_path=f"/uploads/{document_id}.pdf",
            mime_type="application/pdf",
            file_size=2048,
        )
        return document_id

    async def resolve(self, document_id: uuid.UUID) -> DocumentMeta:
        meta = self.documents.get(document_id)
        if meta is None:
            raise DocumentNotFoundError(document_id)
        return meta

    async def set_status(self, document_id: uuid.UUID, status: DocumentStatus) -> None:
        if self.fail_set_status:
            raise RuntimeError("document table unavailable")
        self.status_updates.append((document_id, status))
        meta = self.documents.get(document_id)
        if meta is not None:
            self.documents[document_id] = dataclasses.replace(meta, status=status)

    def status_of(self, document_id: uuid.UUID) -> DocumentStatus:
        return self.documents[document_id].status


class FakeProcessingClient:
    """
    ProcessingClient fake.

    ``responses`` is consumed in order; an exception instance is raised
    instead of returned. ``gate``, when set, blocks submit until released.
    """

    def __init__(self) -> None:
        self.payloads: list[dict[str, Any]] = []
        self.timeouts: list[float | None] = []
        self.responses: list[Any] = []
        self.default_response: Any = {"status": "accepted"}
        self.gate: asyncio.Event | None = None
        self.entered = asyncio.Event()

    async def submit(self, payload: dict[str, Any], timeout: float | None = None) -> Any:
        self.payloads.append(payload)
        self.timeouts.append(timeout)
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.responses.pop(0) if self.responses else self.default_response
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def job_store(clock: FakeClock) -> InMemoryJobStore:
    return InMemoryJobStore(clock)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def processing_client() -> FakeProcessingClient:
    return FakeProcessingClient()


@pytest.fixture
async def manager(job_store, gateway, processing_client, clock):
    """IngestionJobManager wired to in-memory fakes; drained after the test."""
    manager = IngestionJobManager(
        store=job_store,
        gateway=gateway,
        client=processing_client,
        scheduler=DispatchScheduler(),
        clock=clock,
    )
    yield manager
    await manager.shutdown(timeout=1.0)


@pytest.fixture
def caller_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
async def session_factory():
    """
    In-memory SQLite async database with all tables created.

    Yields:
        async_sessionmaker: Session factory bound to the test engine
    """
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from docmanager.boundary.db.create_tables import create_all_tables, drop_all_tables

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all_tables(engine)

    yield async_sessionmaker(engine, autoflush=False, expire_on_commit=False)

    await drop_all_tables(engine)
    await engine.dispose()
