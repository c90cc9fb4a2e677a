"""
Test suite for StaleJobSweeper.

System role: Verification of recovery for jobs stuck in PROCESSING
"""

import asyncio
import uuid
from datetime import timedelta

from docmanager.core.documents import DocumentStatus
from docmanager.core.ingestion.models import IngestionJob, IngestionStatus, IngestionType
from docmanager.core.ingestion.recovery import StaleJobSweeper


async def seed_processing(job_store, started_at, document_id=None) -> IngestionJob:
    return await job_store.create(
        IngestionJob(
            id=uuid.uuid4(),
            ingestion_type=IngestionType.SINGLE_DOCUMENT,
            status=IngestionStatus.PROCESSING,
            document_id=document_id or uuid.uuid4(),
            started_at=started_at,
        )
    )


class TestStaleJobSweeper:
    """Test suite for StaleJobSweeper.sweep_once()."""

    async def test_sweep_fails_only_stale_processing_jobs(self, job_store, gateway, clock) -> None:
        # Arrange
        document_id = gateway.add_document()
        stale = await seed_processing(job_store, clock() - timedelta(minutes=20), document_id)
        fresh = await seed_processing(job_store, clock() - timedelta(minutes=1))
        sweeper = StaleJobSweeper(job_store, gateway, stale_after=timedelta(minutes=15), clock=clock)

        # Act
        recovered = await sweeper.sweep_once()

        # Assert
        assert recovered == 1
        swept = await job_store.get(stale.id)
        assert swept.status == IngestionStatus.FAILED
        assert "900 seconds" in swept.error_message
        assert swept.completed_at == clock()
        assert swept.can_retry
        assert (await job_store.get(fresh.id)).status == IngestionStatus.PROCESSING
        assert gateway.status_of(document_id) == DocumentStatus.ERROR

    async def test_sweep_skips_job_changed_meanwhile(self, job_store, gateway, clock) -> None:
        stale = await seed_processing(job_store, clock() - timedelta(hours=1))
        sweeper = StaleJobSweeper(job_store, gateway, stale_after=timedelta(minutes=15), clock=clock)

        original_find = job_store.find_stale_processing

        async def find_then_complete(started_before):
            found = await original_find(started_before)
            await job_store.transition(
                stale.id, {IngestionStatus.PROCESSING}, status=IngestionStatus.COMPLETED
            )
            return found

        job_store.find_stale_processing = find_then_complete

        recovered = await sweeper.sweep_once()

        assert recovered == 0
        assert (await job_store.get(stale.id)).status == IngestionStatus.COMPLETED

    async def test_start_and_stop_loop(self, job_store, gateway, clock) -> None:
        stale = await seed_processing(job_store, clock() - timedelta(hours=1))
        sweeper = StaleJobSweeper(
            job_store, gateway, stale_after=timedelta(minutes=15), interval=0.01, clock=clock
        )

        sweeper.start()
        for _ in range(100):
            if (await job_store.get(stale.id)).status == IngestionStatus.FAILED:
                break
            await asyncio.sleep(0.01)
        await sweeper.stop()

        assert (await job_store.get(stale.id)).status == IngestionStatus.FAILED
