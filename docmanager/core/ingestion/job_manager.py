"""
Ingestion job manager.

Owns the ingestion job lifecycle: validation, creation, background dispatch
to the processing backend, completion/failure recording, retry, cancellation
and aggregate stats. Holds no job state itself; the JobStore is the single
source of truth and every state-mutating write is a conditional write that
re-checks the job's status (and version) atomically.

Dependencies: docmanager.core.ingestion, docmanager.observability
System role: Core use case orchestration for ingestion jobs
"""

import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from docmanager.core.documents import DocumentStatus
from docmanager.core.exceptions import (
    DocumentNotFoundError,
    InvalidStateError,
    JobNotFoundError,
    ProcessingFailure,
    ServiceUnavailableError,
    ValidationError,
)
from docmanager.core.ingestion.models import (
    CreateJobSpec,
    IngestionJob,
    IngestionStats,
    IngestionStatus,
    IngestionType,
    JobFilters,
    JobPage,
)
from docmanager.core.ingestion.payload import build_payload, resolve_documents
from docmanager.core.ingestion.ports import (
    DocumentStatusGateway,
    JobStore,
    ProcessingClient,
)
from docmanager.core.ingestion.scheduler import DispatchScheduler, SchedulerClosedError
from docmanager.core.ingestion.state_machine import (
    CANCELLABLE_STATUSES,
    can_cancel,
    can_retry,
)
from docmanager.core.ingestion.validation import validate_create_spec
from docmanager.observability.log_utils import log_exception_with_context, log_job_event

logger = logging.getLogger(__name__)

DEFAULT_PROCESSING_TIMEOUT = 30.0

# Optimistic write attempts before a concurrently-modified job is reported
MAX_WRITE_ATTEMPTS = 3


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def _set_document_status(
    gateway: DocumentStatusGateway,
    job: IngestionJob,
    document_id: uuid.UUID,
    status: DocumentStatus,
) -> None:
    try:
        await gateway.set_status(document_id, status)
    except Exception as exc:
        log_exception_with_context(
            logger,
            "Document status mirroring failed",
            exc,
            job_id=job.id,
            document_id=document_id,
            document_status=status.value,
        )


async def mirror_document_status(
    gateway: DocumentStatusGateway, job: IngestionJob, status: DocumentStatus
) -> None:
    """Best-effort document status propagation; failures are only logged."""
    for document_id in job.referenced_document_ids:
        await _set_document_status(gateway, job, document_id, status)


async def restore_document_statuses(
    gateway: DocumentStatusGateway,
    job: IngestionJob,
    previous: Mapping[uuid.UUID, DocumentStatus],
) -> None:
    """
    Put each referenced document back to the status it had before dispatch.

    Documents without a recorded status, or recorded as PROCESSING, go back
    to UPLOADED.
    """
    for document_id in job.referenced_document_ids:
        status = previous.get(document_id, DocumentStatus.UPLOADED)
        if status == DocumentStatus.PROCESSING:
            status = DocumentStatus.UPLOADED
        await _set_document_status(gateway, job, document_id, status)


class IngestionJobManager:
    """
    Ingestion job lifecycle orchestrator.

    create/retry return as soon as the job is persisted; dispatch runs in the
    background via DispatchScheduler and its outcome is only observable by
    re-reading the job.
    """

    def __init__(
        self,
        store: JobStore,
        gateway: DocumentStatusGateway,
        client: ProcessingClient,
        scheduler: DispatchScheduler | None = None,
        processing_timeout: float = DEFAULT_PROCESSING_TIMEOUT,
        default_max_retries: int = 3,
        max_page_size: int = 100,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """
        Initialize job manager.

        Args:
            store: Durable job store
            gateway: Document lookup and status mirroring
            client: Processing backend client
            scheduler: Background dispatch scheduler (new one if omitted)
            processing_timeout: Seconds before a backend call counts as failed
            default_max_retries: max_retries for jobs that do not set one
            max_page_size: Upper bound for find_all limit
            clock: Timestamp source (UTC)
        """
        self.store = store
        self.gateway = gateway
        self.client = client
        self.scheduler = scheduler or DispatchScheduler()
        self.processing_timeout = processing_timeout
        self.default_max_retries = default_max_retries
        self.max_page_size = max_page_size
        self._clock = clock
        # Document statuses read at dispatch start, keyed by job id, while dispatch runs
        self._previous_document_statuses: dict[uuid.UUID, dict[uuid.UUID, DocumentStatus]] = {}

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create(self, spec: CreateJobSpec, caller_id: uuid.UUID) -> IngestionJob:
        """
        Validate, persist a PENDING job, and schedule its dispatch.

        Args:
            spec: Create request
            caller_id: Identity stamped into triggered_by

        Returns:
            IngestionJob: Persisted job in PENDING

        Raises:
            ValidationError: Malformed request
            DocumentNotFoundError: A referenced document does not exist
            ServiceUnavailableError: Manager is shutting down
            StoreError: Persistence failed
        """
        self._ensure_accepting("create")
        job = await validate_create_spec(spec, self.gateway, self.default_max_retries)
        job.triggered_by = caller_id

        saved = await self.store.create(job)
        log_job_event(
            logger,
            logging.INFO,
            "Ingestion job created",
            saved,
            triggered_by=caller_id,
            document_count=len(saved.referenced_document_ids),
        )

        self._schedule(saved)
        return saved

    async def retry(self, job_id: uuid.UUID) -> IngestionJob:
        """
        Reset a FAILED job to PENDING and schedule a new dispatch.

        Raises:
            JobNotFoundError: Unknown job id
            InvalidStateError: Job is not FAILED or has no retries left
            ServiceUnavailableError: Manager is shutting down
        """
        self._ensure_accepting("retry")
        for _ in range(MAX_WRITE_ATTEMPTS):
            job = await self.find_by_id(job_id)
            if not can_retry(job):
                reason = None
                if job.status == IngestionStatus.FAILED:
                    reason = f"retry limit reached ({job.retry_count}/{job.max_retries})"
                raise InvalidStateError(job.id, job.status.value, "retry", reason)

            updated = await self.store.transition(
                job.id,
                {IngestionStatus.FAILED},
                expected_version=job.version,
                status=IngestionStatus.PENDING,
                error_message=None,
                started_at=None,
                completed_at=None,
                progress=0,
                retry_count=job.retry_count + 1,
            )
            if updated is not None:
                log_job_event(
                    logger,
                    logging.INFO,
                    "Ingestion job retry scheduled",
                    updated,
                    max_retries=updated.max_retries,
                )
                self._schedule(updated)
                return updated

        raise InvalidStateError(job.id, job.status.value, "retry", "job changed concurrently")

    async def cancel(self, job_id: uuid.UUID) -> IngestionJob:
        """
        Mark a PENDING or PROCESSING job CANCELLED.

        An in-flight backend call is not aborted; its completion write is
        discarded by the conditional write in dispatch. Documents of a
        PROCESSING job go back to the status they had before dispatch.

        Raises:
            JobNotFoundError: Unknown job id
            InvalidStateError: Job is COMPLETED, FAILED or already CANCELLED
        """
        for _ in range(MAX_WRITE_ATTEMPTS):
            job = await self.find_by_id(job_id)
            if not can_cancel(job):
                raise InvalidStateError(job.id, job.status.value, "cancel")

            updated = await self.store.transition(
                job.id,
                CANCELLABLE_STATUSES,
                expected_version=job.version,
                status=IngestionStatus.CANCELLED,
                completed_at=self._completion_time(job),
            )
            if updated is not None:
                log_job_event(
                    logger,
                    logging.INFO,
                    "Ingestion job cancelled",
                    updated,
                    previous_status=job.status,
                )
                if job.status == IngestionStatus.PROCESSING:
                    await self._restore_documents(updated)
                return updated

        raise InvalidStateError(job.id, job.status.value, "cancel", "job changed concurrently")

    async def dispatch(self, job_id: uuid.UUID) -> None:
        """
        Drive one job through PROCESSING to COMPLETED or FAILED.

        Never raises for backend failures: they are recorded on the job.
        A job that is no longer PENDING (e.g. cancelled before pickup) is skipped,
        and a job cancelled while its documents were being marked PROCESSING
        is never submitted.
        """
        job = await self.store.transition(
            job_id,
            {IngestionStatus.PENDING},
            status=IngestionStatus.PROCESSING,
            started_at=self._clock(),
        )
        if job is None:
            current = await self.store.get(job_id)
            logger.info(
                "Dispatch skipped: job is no longer pending",
                extra={
                    "job_id": str(job_id),
                    "status": current.status.value if current else None,
                },
            )
            return

        log_job_event(logger, logging.INFO, "Ingestion job processing", job)

        try:
            documents = await resolve_documents(job, self.gateway)
        except Exception as exc:
            await self._record_dispatch_error(job, exc)
            return

        self._previous_document_statuses[job.id] = {meta.id: meta.status for meta in documents}
        try:
            await self._mirror(job, DocumentStatus.PROCESSING)
            if not await self._owns_processing(job):
                return

            try:
                response = await self.client.submit(
                    build_payload(job, documents), timeout=self.processing_timeout
                )
            except Exception as exc:
                await self._record_dispatch_error(job, exc)
                return

            await self._record_success(job, response)
        finally:
            self._previous_document_statuses.pop(job.id, None)

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Drain in-flight dispatches; cancel those still running after ``timeout``."""
        await self.scheduler.shutdown(timeout=timeout)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_by_id(self, job_id: uuid.UUID) -> IngestionJob:
        job = await self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def find_all(
        self,
        page: int = 1,
        limit: int = 10,
        status: IngestionStatus | None = None,
        ingestion_type: IngestionType | None = None,
        triggered_by: uuid.UUID | None = None,
    ) -> JobPage:
        """
        List jobs newest first with optional filters.

        Raises:
            ValidationError: page < 1 or limit outside 1..max_page_size
        """
        if page < 1:
            raise ValidationError("page must be >= 1", field="page")
        if limit < 1 or limit > self.max_page_size:
            raise ValidationError(
                f"limit must be between 1 and {self.max_page_size}", field="limit"
            )

        filters = JobFilters(
            status=status, ingestion_type=ingestion_type, triggered_by=triggered_by
        )
        jobs, total = await self.store.query(filters, offset=(page - 1) * limit, limit=limit)
        return JobPage(jobs=jobs, total=total, page=page, limit=limit)

    async def stats(self) -> IngestionStats:
        """
        Aggregate counts and mean completed duration.

        average_duration is whole seconds (floored) across COMPLETED jobs with
        both timestamps; 0 when there are none.
        """
        status_counts = await self.store.count_by_status()
        type_counts = await self.store.count_by_type()
        durations = await self.store.completed_durations()

        by_status = {status: status_counts.get(status, 0) for status in IngestionStatus}
        by_type = {kind: type_counts.get(kind, 0) for kind in IngestionType}
        average = int(sum(durations) / len(durations)) if durations else 0

        return IngestionStats(
            total=sum(by_status.values()),
            by_status=by_status,
            by_type=by_type,
            average_duration=average,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_accepting(self, operation: str) -> None:
        if self.scheduler.closed:
            raise ServiceUnavailableError(operation)

    def _schedule(self, job: IngestionJob) -> None:
        """Schedule dispatch for a job that is already persisted as PENDING."""
        try:
            self.scheduler.schedule(job.id, self.dispatch)
        except SchedulerClosedError:
            # Shutdown began during the store write; the row stays PENDING
            log_job_event(
                logger, logging.ERROR, "Dispatch not scheduled: manager shutting down", job
            )

    async def _record_dispatch_error(self, job: IngestionJob, exc: Exception) -> None:
        if isinstance(exc, ProcessingFailure):
            await self._record_failure(job, exc.reason, exc.kind)
        elif isinstance(exc, DocumentNotFoundError):
            await self._record_failure(job, exc.message, "document_missing")
        else:
            log_exception_with_context(
                logger, "Unexpected error during dispatch", exc, job_id=job.id
            )
            await self._record_failure(job, str(exc) or type(exc).__name__, "unexpected")

    async def _owns_processing(self, job: IngestionJob) -> bool:
        """
        True while the PROCESSING write this dispatch made is still current.

        A cancel (or stale sweep) that landed while documents were being
        marked PROCESSING wins; the documents are put back to match it.
        """
        current = await self.store.get(job.id)
        if current is not None and current.version == job.version:
            return True

        current_status = current.status if current is not None else None
        log_job_event(
            logger,
            logging.INFO,
            "Dispatch abandoned before submission: job changed",
            job,
            current_status=current_status,
        )
        if current_status == IngestionStatus.CANCELLED:
            await self._restore_documents(job)
        elif current_status == IngestionStatus.FAILED:
            await self._mirror(job, DocumentStatus.ERROR)
        return False

    async def _restore_documents(self, job: IngestionJob) -> None:
        previous = self._previous_document_statuses.get(job.id, {})
        await restore_document_statuses(self.gateway, job, previous)

    def _completion_time(self, job: IngestionJob) -> datetime:
        """Now, but never earlier than started_at."""
        now = self._clock()
        if job.started_at is not None and now < job.started_at:
            return job.started_at
        return now

    async def _record_success(self, job: IngestionJob, response: Any) -> None:
        updated = await self._finish(
            job,
            status=IngestionStatus.COMPLETED,
            completed_at=self._completion_time(job),
            progress=100,
            result=response,
        )
        if updated is None:
            return
        log_job_event(
            logger,
            logging.INFO,
            "Ingestion job completed",
            updated,
            duration_seconds=updated.duration_seconds,
        )
        await self._mirror(updated, DocumentStatus.PROCESSED)

    async def _record_failure(self, job: IngestionJob, reason: str, kind: str) -> None:
        updated = await self._finish(
            job,
            status=IngestionStatus.FAILED,
            completed_at=self._completion_time(job),
            error_message=reason or "Unknown error occurred",
        )
        if updated is None:
            return
        log_job_event(
            logger, logging.WARNING, "Ingestion job failed", updated, failure_kind=kind, error=reason
        )
        await self._mirror(updated, DocumentStatus.ERROR)

    async def _finish(self, job: IngestionJob, **changes: Any) -> IngestionJob | None:
        """Terminal write guarded on the PROCESSING snapshot this dispatch owns."""
        updated = await self.store.transition(
            job.id,
            {IngestionStatus.PROCESSING},
            expected_version=job.version,
            **changes,
        )
        if updated is None:
            current = await self.store.get(job.id)
            logger.info(
                "Dispatch outcome discarded: job changed during processing",
                extra={
                    "job_id": str(job.id),
                    "attempted_status": changes["status"].value,
                    "current_status": current.status.value if current else None,
                },
            )
        return updated

    async def _mirror(self, job: IngestionJob, status: DocumentStatus) -> None:
        await mirror_document_status(self.gateway, job, status)
