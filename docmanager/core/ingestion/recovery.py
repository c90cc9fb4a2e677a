"""
Stale job recovery.

A process crash between PROCESSING and the terminal write leaves a job in
PROCESSING forever. The sweeper periodically fails such jobs so that they
become retryable. Disabled unless INGESTION_STALE_SWEEP_ENABLED is set.

Dependencies: asyncio, docmanager.core.ingestion
System role: Background maintenance task started by the API lifespan
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from docmanager.core.documents import DocumentStatus
from docmanager.core.ingestion.job_manager import mirror_document_status, utcnow
from docmanager.core.ingestion.models import IngestionStatus
from docmanager.core.ingestion.ports import DocumentStatusGateway, JobStore

logger = logging.getLogger(__name__)

STALE_ERROR_MESSAGE = "Processing did not complete within {seconds} seconds; marked failed by recovery"


class StaleJobSweeper:
    """Fails PROCESSING jobs whose started_at is older than ``stale_after``."""

    def __init__(
        self,
        store: JobStore,
        gateway: DocumentStatusGateway,
        stale_after: timedelta,
        interval: float = 60.0,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.stale_after = stale_after
        self.interval = interval
        self._clock = clock
        self._task: asyncio.Task | None = None

    async def sweep_once(self) -> int:
        """
        Run one sweep.

        Returns:
            int: Number of jobs moved to FAILED
        """
        now = self._clock()
        stale_jobs = await self.store.find_stale_processing(now - self.stale_after)
        message = STALE_ERROR_MESSAGE.format(seconds=int(self.stale_after.total_seconds()))

        recovered = 0
        for job in stale_jobs:
            completed_at = max(now, job.started_at) if job.started_at else now
            updated = await self.store.transition(
                job.id,
                {IngestionStatus.PROCESSING},
                expected_version=job.version,
                status=IngestionStatus.FAILED,
                completed_at=completed_at,
                error_message=message,
            )
            if updated is None:
                continue
            recovered += 1
            logger.warning(
                "Stale ingestion job marked failed",
                extra={"job_id": str(job.id), "started_at": str(job.started_at)},
            )
            await mirror_document_status(self.gateway, updated, DocumentStatus.ERROR)

        if recovered:
            logger.info("Recovery sweep finished", extra={"recovered": recovered})
        return recovered

    async def _loop(self) -> None:
        while True:
            try:
                await self.sweep_once()
            except Exception:
                logger.exception("Recovery sweep failed")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop(), name="ingestion-stale-sweeper")
            logger.info(
                "Stale job sweeper started",
                extra={
                    "stale_after_seconds": int(self.stale_after.total_seconds()),
                    "interval_seconds": self.interval,
                },
            )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
