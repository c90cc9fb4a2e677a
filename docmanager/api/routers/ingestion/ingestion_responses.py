"""
Ingestion response mapping utilities.

Transforms domain job snapshots and stats into Pydantic response models.

Dependencies: docmanager.models.ingestion, docmanager.core.ingestion
System role: Ingestion response transformation
"""

import math

from docmanager.core.ingestion.models import IngestionJob, IngestionStats, JobPage
from docmanager.models.ingestion import (
    IngestionJobResponse,
    IngestionStatsResponse,
    JobListResponse,
)


def map_job_to_response(job: IngestionJob) -> IngestionJobResponse:
    """
    Transform an IngestionJob into IngestionJobResponse.

    Args:
        job: Domain job snapshot

    Returns:
        IngestionJobResponse: Pydantic model for API response
    """
    return IngestionJobResponse(
        id=job.id,
        ingestion_type=job.ingestion_type,
        status=job.status,
        name=job.name,
        description=job.description,
        document_id=job.document_id,
        document_ids=job.document_ids,
        configuration=job.configuration,
        result=job.result,
        error_message=job.error_message,
        progress=job.progress,
        retry_count=job.retry_count,
        max_retries=job.max_retries,
        started_at=job.started_at,
        completed_at=job.completed_at,
        triggered_by=job.triggered_by,
        created_at=job.created_at,
        updated_at=job.updated_at,
        duration=job.duration_seconds,
        can_retry=job.can_retry,
        can_cancel=job.can_cancel,
    )


def map_page_to_response(page: JobPage) -> JobListResponse:
    return JobListResponse(
        jobs=[map_job_to_response(job) for job in page.jobs],
        total=page.total,
        page=page.page,
        limit=page.limit,
        total_pages=math.ceil(page.total / page.limit) if page.total else 0,
    )


def map_stats_to_response(stats: IngestionStats) -> IngestionStatsResponse:
    return IngestionStatsResponse(
        total=stats.total,
        by_status=stats.by_status,
        by_type=stats.by_type,
        average_duration=stats.average_duration,
    )
