"""
Ingestion job request/response schemas.

camelCase on the wire (ingestionType, documentIds, maxRetries, ...);
snake_case field names are accepted too.

Dependencies: pydantic
System role: Ingestion job API contracts
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from docmanager.core.ingestion.models import IngestionStatus, IngestionType


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateIngestionJobRequest(CamelModel):
    """Request schema for creating an ingestion job."""

    ingestion_type: IngestionType = Field(..., description="Job kind")
    document_id: uuid.UUID | None = Field(
        None, description="Required for single_document and reprocess"
    )
    document_ids: list[uuid.UUID] | None = Field(
        None, description="Required (non-empty) for batch_documents"
    )
    name: str | None = Field(None, max_length=255, description="Job label")
    description: str | None = Field(None, max_length=4096, description="Job description")
    configuration: dict[str, Any] | None = Field(
        None, description="Opaque processing configuration"
    )
    max_retries: int | None = Field(None, ge=0, description="Retry ceiling (default 3)")


class IngestionJobResponse(CamelModel):
    """Response schema for one ingestion job."""

    id: uuid.UUID
    ingestion_type: IngestionType
    status: IngestionStatus
    name: str | None
    description: str | None
    document_id: uuid.UUID | None
    document_ids: list[uuid.UUID]
    configuration: dict[str, Any]
    result: Any | None
    error_message: str | None
    progress: int
    retry_count: int
    max_retries: int
    started_at: datetime | None
    completed_at: datetime | None
    triggered_by: uuid.UUID | None
    created_at: datetime | None
    updated_at: datetime | None
    duration: int | None = Field(None, description="Seconds from start to completion")
    can_retry: bool
    can_cancel: bool


class JobListResponse(CamelModel):
    """Paged job list."""

    jobs: list[IngestionJobResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class IngestionStatsResponse(CamelModel):
    """Aggregate job stats."""

    total: int
    by_status: dict[IngestionStatus, int]
    by_type: dict[IngestionType, int]
    average_duration: int = Field(description="Mean completed-job duration in whole seconds")
