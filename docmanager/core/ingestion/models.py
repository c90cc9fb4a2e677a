"""
Ingestion job domain models.

Job record, status/type enums, and the value objects passed in and out
of the job manager. Persistence rows are converted to these by the store.

Dependencies: None (pure domain layer)
System role: Ingestion job vocabulary shared across layers
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any


class IngestionStatus(str, enum.Enum):
    """
    Ingestion job lifecycle states.

    PENDING: Persisted, waiting for background dispatch
    PROCESSING: Dispatch started; processing backend call in flight
    COMPLETED: Backend accepted the job; result holds its response (terminal)
    FAILED: Backend call failed; error_message holds the reason (retryable)
    CANCELLED: Cancelled by a caller (terminal)
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class IngestionType(str, enum.Enum):
    """Ingestion job kinds; fixed at creation."""

    SINGLE_DOCUMENT = "single_document"
    BATCH_DOCUMENTS = "batch_documents"
    REPROCESS = "reprocess"


@dataclass
class IngestionJob:
    """Snapshot of one ingestion job as held by the job store."""

    id: uuid.UUID
    ingestion_type: IngestionType
    status: IngestionStatus = IngestionStatus.PENDING
    name: str | None = None
    description: str | None = None
    document_id: uuid.UUID | None = None
    document_ids: list[uuid.UUID] = field(default_factory=list)
    configuration: dict[str, Any] = field(default_factory=dict)
    result: Any = None
    error_message: str | None = None
    progress: int = 0
    retry_count: int = 0
    max_retries: int = 3
    started_at: datetime | None = None
    completed_at: datetime | None = None
    triggered_by: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 1

    @property
    def referenced_document_ids(self) -> list[uuid.UUID]:
        """Every document this job mirrors its state onto."""
        if self.ingestion_type == IngestionType.BATCH_DOCUMENTS:
            return list(self.document_ids)
        return [self.document_id] if self.document_id else []

    @property
    def can_retry(self) -> bool:
        return self.status == IngestionStatus.FAILED and self.retry_count < self.max_retries

    @property
    def can_cancel(self) -> bool:
        return self.status in (IngestionStatus.PENDING, IngestionStatus.PROCESSING)

    @property
    def is_terminal(self) -> bool:
        """COMPLETED, CANCELLED, or FAILED with no retries left."""
        if self.status in (IngestionStatus.COMPLETED, IngestionStatus.CANCELLED):
            return True
        return self.status == IngestionStatus.FAILED and not self.can_retry

    @property
    def duration(self) -> timedelta | None:
        if self.started_at is None or self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    @property
    def duration_seconds(self) -> int | None:
        duration = self.duration
        return int(duration.total_seconds()) if duration is not None else None


@dataclass
class CreateJobSpec:
    """
    Caller-supplied create request, before validation.

    ingestion_type is kept raw (str or enum) so the validator can reject
    missing or unrecognized values before anything is persisted.
    """

    ingestion_type: IngestionType | str | None
    document_id: uuid.UUID | None = None
    document_ids: list[uuid.UUID] | None = None
    name: str | None = None
    description: str | None = None
    configuration: Any = None
    max_retries: int | None = None


@dataclass(frozen=True)
class JobFilters:
    """Optional list filters; None means no constraint."""

    status: IngestionStatus | None = None
    ingestion_type: IngestionType | None = None
    triggered_by: uuid.UUID | None = None


@dataclass
class JobPage:
    """One page of jobs plus the total matching count."""

    jobs: list[IngestionJob]
    total: int
    page: int
    limit: int


@dataclass
class IngestionStats:
    """Aggregate counts and the mean completed-job duration in seconds."""

    total: int
    by_status: dict[IngestionStatus, int]
    by_type: dict[IngestionType, int]
    average_duration: int
