"""
Ingestion job ORM model.

Durable record of one ingestion job: type, lifecycle status, referenced
documents, backend result or error, retry bookkeeping and timestamps.

Dependencies: sqlalchemy, docmanager.boundary.db.base
System role: Persistence for the ingestion job store
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from docmanager.boundary.db.base import Base, TimestampMixin, UUIDMixin, enum_values
from docmanager.core.ingestion.models import IngestionStatus, IngestionType


class IngestionJobModel(Base, UUIDMixin, TimestampMixin):
    """
    Ingestion job ORM model.

    Every status change goes through a conditional UPDATE guarded on status
    (and version), so concurrent dispatch/cancel/retry writes cannot
    overwrite each other.

    Attributes:
        id: UUID primary key
        ingestion_type: Job kind (single_document/batch_documents/reprocess)
        status: Lifecycle state (pending/processing/completed/failed/cancelled)
        name, description: Optional caller-supplied labels
        document_id: Referenced document for single_document/reprocess jobs
        document_ids: JSON list of referenced document ids for batch jobs
        configuration: Opaque JSON object forwarded to the processing backend
        result: Backend response for COMPLETED jobs
        error_message: Failure reason for FAILED jobs
        progress: 0..100
        retry_count: Number of explicit retries so far
        max_retries: Retry ceiling
        started_at: Set when dispatch moves the job to PROCESSING
        completed_at: Set on COMPLETED/FAILED/CANCELLED
        triggered_by: Caller identity that created the job
        version: Incremented on every write

    Indexes:
        status, ingestion_type, triggered_by, document_id, created_at
    """

    __tablename__ = "ingestion_jobs"
    __table_args__ = (
        Index("ix_ingestion_jobs_status", "status"),
        Index("ix_ingestion_jobs_ingestion_type", "ingestion_type"),
        Index("ix_ingestion_jobs_triggered_by", "triggered_by"),
        Index("ix_ingestion_jobs_document_id", "document_id"),
        Index("ix_ingestion_jobs_created_at", "created_at"),
    )

    ingestion_type: Mapped[IngestionType] = mapped_column(
        Enum(IngestionType, native_enum=False, values_callable=enum_values, length=32),
        nullable=False,
    )

    status: Mapped[IngestionStatus] = mapped_column(
        Enum(IngestionStatus, native_enum=False, values_callable=enum_values, length=32),
        nullable=False,
        default=IngestionStatus.PENDING,
    )

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    document_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        doc="Referenced document for single_document/reprocess jobs",
    )

    document_ids: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        doc="Referenced document ids (strings) for batch jobs",
    )

    configuration: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        doc="Opaque processing configuration",
    )

    result: Mapped[Any | None] = mapped_column(
        JSON,
        nullable=True,
        doc="Processing backend response",
    )

    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    progress: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Progress percentage (0-100)",
    )

    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_retries: Mapped[int] = mapped_column(Integer, nullable=False, default=3)

    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    triggered_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        doc="Optimistic concurrency counter",
    )
