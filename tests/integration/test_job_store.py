"""
Test suite for SqlJobStore against in-memory SQLite.

Exercises the conditional write, paging, aggregates and stale-job lookup
through the real ORM mapping.

System role: Verification of ingestion job persistence
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from docmanager.boundary.db.job_store import SqlJobStore
from docmanager.core.exceptions import StoreError
from docmanager.core.ingestion.models import (
    IngestionJob,
    IngestionStatus,
    IngestionType,
    JobFilters,
)

T0 = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(session_factory) -> SqlJobStore:
    return SqlJobStore(session_factory)


def make_job(**fields) -> IngestionJob:
    defaults = dict(
        id=uuid.uuid4(),
        ingestion_type=IngestionType.SINGLE_DOCUMENT,
        status=IngestionStatus.PENDING,
        document_id=uuid.uuid4(),
    )
    defaults.update(fields)
    return IngestionJob(**defaults)


class TestCreateAndGet:
    """Test suite for create() and get()."""

    async def test_create_round_trips_all_fields(self, store: SqlJobStore) -> None:
        # Arrange
        caller = uuid.uuid4()
        ids = [uuid.uuid4(), uuid.uuid4()]
        job = make_job(
            ingestion_type=IngestionType.BATCH_DOCUMENTS,
            document_id=None,
            document_ids=ids,
            name="Batch",
            configuration={"chunk_size": 256, "ocr": False},
            max_retries=5,
            triggered_by=caller,
        )

        # Act
        saved = await store.create(job)
        loaded = await store.get(job.id)

        # Assert
        assert saved.created_at is not None
        assert loaded.ingestion_type == IngestionType.BATCH_DOCUMENTS
        assert loaded.status == IngestionStatus.PENDING
        assert loaded.document_ids == ids
        assert loaded.configuration == {"chunk_size": 256, "ocr": False}
        assert loaded.max_retries == 5
        assert loaded.triggered_by == caller
        assert loaded.version == 1
        assert loaded.created_at.tzinfo is not None

    async def test_get_unknown_returns_none(self, store: SqlJobStore) -> None:
        assert await store.get(uuid.uuid4()) is None


class TestTransition:
    """Test suite for the conditional write."""

    async def test_matching_guard_applies_changes_and_bumps_version(
        self, store: SqlJobStore
    ) -> None:
        job = await store.create(make_job())

        updated = await store.transition(
            job.id,
            {IngestionStatus.PENDING},
            expected_version=1,
            status=IngestionStatus.PROCESSING,
            started_at=T0,
        )

        assert updated.status == IngestionStatus.PROCESSING
        assert updated.started_at == T0
        assert updated.version == 2

    async def test_status_mismatch_is_noop(self, store: SqlJobStore) -> None:
        job = await store.create(make_job(status=IngestionStatus.CANCELLED))

        updated = await store.transition(
            job.id, {IngestionStatus.PROCESSING}, status=IngestionStatus.COMPLETED, progress=100
        )

        assert updated is None
        reloaded = await store.get(job.id)
        assert reloaded.status == IngestionStatus.CANCELLED
        assert reloaded.version == 1

    async def test_version_mismatch_is_noop(self, store: SqlJobStore) -> None:
        job = await store.create(make_job())
        await store.transition(job.id, {IngestionStatus.PENDING}, progress=10)

        updated = await store.transition(
            job.id,
            {IngestionStatus.PENDING},
            expected_version=1,
            status=IngestionStatus.CANCELLED,
        )

        assert updated is None
        assert (await store.get(job.id)).status == IngestionStatus.PENDING

    async def test_unknown_job_is_noop(self, store: SqlJobStore) -> None:
        assert await store.transition(uuid.uuid4(), {IngestionStatus.PENDING}, progress=1) is None

    async def test_result_json_is_persisted(self, store: SqlJobStore) -> None:
        job = await store.create(make_job(status=IngestionStatus.PROCESSING, started_at=T0))

        await store.transition(
            job.id,
            {IngestionStatus.PROCESSING},
            status=IngestionStatus.COMPLETED,
            completed_at=T0 + timedelta(seconds=3),
            progress=100,
            result={"chunks": [1, 2, 3]},
        )

        loaded = await store.get(job.id)
        assert loaded.result == {"chunks": [1, 2, 3]}
        assert loaded.duration_seconds == 3


class TestQueries:
    """Test suite for query(), counts and durations."""

    async def test_query_filters_and_pages(self, store: SqlJobStore) -> None:
        caller = uuid.uuid4()
        for index in range(3):
            await store.create(make_job(triggered_by=caller, name=f"job-{index}"))
        await store.create(make_job(status=IngestionStatus.FAILED))

        jobs, total = await store.query(JobFilters(triggered_by=caller), offset=0, limit=2)
        failed, failed_total = await store.query(
            JobFilters(status=IngestionStatus.FAILED), offset=0, limit=10
        )

        assert total == 3
        assert len(jobs) == 2
        assert all(job.triggered_by == caller for job in jobs)
        assert failed_total == 1
        assert failed[0].status == IngestionStatus.FAILED

    async def test_query_orders_newest_first(self, store: SqlJobStore) -> None:
        older = await store.create(make_job(name="older"))
        await store.transition(
            older.id, {IngestionStatus.PENDING}, created_at=datetime(2020, 1, 1, tzinfo=timezone.utc)
        )
        newer = await store.create(make_job(name="newer"))

        jobs, _ = await store.query(JobFilters(), offset=0, limit=10)

        assert [job.id for job in jobs] == [newer.id, older.id]

    async def test_counts_group_by_status_and_type(self, store: SqlJobStore) -> None:
        await store.create(make_job())
        await store.create(make_job(status=IngestionStatus.FAILED))
        await store.create(make_job(ingestion_type=IngestionType.REPROCESS))

        by_status = await store.count_by_status()
        by_type = await store.count_by_type()

        assert by_status == {IngestionStatus.PENDING: 2, IngestionStatus.FAILED: 1}
        assert by_type == {IngestionType.SINGLE_DOCUMENT: 2, IngestionType.REPROCESS: 1}

    async def test_completed_durations_only_for_complete_timestamps(
        self, store: SqlJobStore
    ) -> None:
        await store.create(
            make_job(
                status=IngestionStatus.COMPLETED,
                started_at=T0,
                completed_at=T0 + timedelta(milliseconds=5000),
            )
        )
        await store.create(make_job(status=IngestionStatus.COMPLETED, started_at=T0))
        await store.create(
            make_job(
                status=IngestionStatus.FAILED,
                started_at=T0,
                completed_at=T0 + timedelta(seconds=60),
            )
        )

        assert await store.completed_durations() == [5.0]

    async def test_find_stale_processing(self, store: SqlJobStore) -> None:
        stale = await store.create(
            make_job(status=IngestionStatus.PROCESSING, started_at=T0 - timedelta(hours=1))
        )
        await store.create(make_job(status=IngestionStatus.PROCESSING, started_at=T0))
        await store.create(
            make_job(status=IngestionStatus.PENDING, started_at=T0 - timedelta(hours=1))
        )

        found = await store.find_stale_processing(T0 - timedelta(minutes=15))

        assert [job.id for job in found] == [stale.id]


class TestErrors:
    """Test suite for SQLAlchemy error wrapping."""

    async def test_sqlalchemy_error_becomes_store_error(self) -> None:
        # Arrange
        class BrokenSession:
            rolled_back = False

            async def execute(self, *args, **kwargs):
                raise OperationalError("SELECT", {}, Exception("db gone"))

            async def rollback(self):
                self.rolled_back = True

            async def __aenter__(self):
                return self

            async def __aexit__(self, *exc_info):
                return False

        session = BrokenSession()
        store = SqlJobStore(lambda: session)

        # Act
        with pytest.raises(StoreError) as exc_info:
            await store.get(uuid.uuid4())

        # Assert
        assert exc_info.value.details["operation"] == "get"
        assert session.rolled_back is True
