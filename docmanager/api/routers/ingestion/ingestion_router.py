"""
Ingestion job API endpoints.

Routes:
- POST /ingestion/jobs - Create job (editor, admin)
- GET /ingestion/jobs - List jobs with paging and filters
- GET /ingestion/jobs/stats - Aggregate stats (admin)
- GET /ingestion/jobs/{id} - Get single job
- PATCH /ingestion/jobs/{id}/retry - Retry a failed job (editor, admin)
- PATCH /ingestion/jobs/{id}/cancel - Cancel a pending/processing job (editor, admin)

Dependencies: docmanager.core.ingestion, docmanager.models, docmanager.api.deps
System role: Ingestion job lifecycle HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from docmanager.api.deps.dependencies import (
    get_caller_identity,
    get_ingestion_manager,
    require_admin,
    require_job_manager,
)
from docmanager.core.identity import CallerIdentity
from docmanager.core.ingestion.job_manager import IngestionJobManager
from docmanager.core.ingestion.models import CreateJobSpec, IngestionStatus, IngestionType
from docmanager.models.common import ErrorResponse, InvalidStateDetail
from docmanager.models.ingestion import (
    CreateIngestionJobRequest,
    IngestionJobResponse,
    IngestionStatsResponse,
    JobListResponse,
)

from .ingestion_error_handling import handle_ingestion_errors
from .ingestion_responses import (
    map_job_to_response,
    map_page_to_response,
    map_stats_to_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ingestion/jobs", tags=["ingestion"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Job not found"}}
CONFLICT = {409: {"model": InvalidStateDetail, "description": "Not allowed in current status"}}
UNAVAILABLE = {503: {"model": ErrorResponse, "description": "Ingestion is shutting down"}}


@router.post(
    "",
    response_model=IngestionJobResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, **NOT_FOUND, **UNAVAILABLE},
)
@handle_ingestion_errors
async def create_ingestion_job(
    request: CreateIngestionJobRequest,
    caller: CallerIdentity = Depends(require_job_manager),
    manager: IngestionJobManager = Depends(get_ingestion_manager),
) -> IngestionJobResponse:
    """
    Create an ingestion job and schedule it for background processing.

    Returns the job in PENDING; poll GET /ingestion/jobs/{id} for progress.

    Raises:
        HTTPException(400): Missing/malformed fields
        HTTPException(404): A referenced document does not exist
        HTTPException(500): Persistence failed
    """
    logger.info(
        "Creating ingestion job",
        extra={
            "ingestion_type": request.ingestion_type.value,
            "user_id": str(caller.id),
            "document_count": len(request.document_ids or []) or int(request.document_id is not None),
        },
    )

    job = await manager.create(
        CreateJobSpec(
            ingestion_type=request.ingestion_type,
            document_id=request.document_id,
            document_ids=request.document_ids,
            name=request.name,
            description=request.description,
            configuration=request.configuration,
            max_retries=request.max_retries,
        ),
        caller_id=caller.id,
    )
    return map_job_to_response(job)


@router.get("", response_model=JobListResponse, responses={400: {"model": ErrorResponse}})
@handle_ingestion_errors
async def list_ingestion_jobs(
    page: int = Query(1, description="1-based page number"),
    limit: int = Query(10, description="Page size (1-100)"),
    status: IngestionStatus | None = Query(None),
    ingestion_type: IngestionType | None = Query(None, alias="ingestionType"),
    triggered_by: UUID | None = Query(None, alias="triggeredBy"),
    caller: CallerIdentity = Depends(get_caller_identity),
    manager: IngestionJobManager = Depends(get_ingestion_manager),
) -> JobListResponse:
    """
    List ingestion jobs, newest first.

    Raises:
        HTTPException(400): page < 1 or limit outside 1..100
    """
    job_page = await manager.find_all(
        page=page,
        limit=limit,
        status=status,
        ingestion_type=ingestion_type,
        triggered_by=triggered_by,
    )
    return map_page_to_response(job_page)


@router.get("/stats", response_model=IngestionStatsResponse)
@handle_ingestion_errors
async def get_ingestion_stats(
    caller: CallerIdentity = Depends(require_admin),
    manager: IngestionJobManager = Depends(get_ingestion_manager),
) -> IngestionStatsResponse:
    """Job counts by status and type plus mean completed duration (seconds)."""
    stats = await manager.stats()
    return map_stats_to_response(stats)


@router.get("/{job_id}", response_model=IngestionJobResponse, responses=NOT_FOUND)
@handle_ingestion_errors
async def get_ingestion_job(
    job_id: UUID,
    caller: CallerIdentity = Depends(get_caller_identity),
    manager: IngestionJobManager = Depends(get_ingestion_manager),
) -> IngestionJobResponse:
    job = await manager.find_by_id(job_id)
    return map_job_to_response(job)


@router.patch(
    "/{job_id}/retry",
    response_model=IngestionJobResponse,
    responses={**NOT_FOUND, **CONFLICT, **UNAVAILABLE},
)
@handle_ingestion_errors
async def retry_ingestion_job(
    job_id: UUID,
    caller: CallerIdentity = Depends(require_job_manager),
    manager: IngestionJobManager = Depends(get_ingestion_manager),
) -> IngestionJobResponse:
    """
    Reset a FAILED job to PENDING and schedule it again.

    Raises:
        HTTPException(404): Job not found
        HTTPException(409): Job is not FAILED or has exhausted its retries
        HTTPException(503): Service is shutting down
    """
    logger.info("Retrying ingestion job", extra={"job_id": str(job_id), "user_id": str(caller.id)})
    job = await manager.retry(job_id)
    return map_job_to_response(job)


@router.patch(
    "/{job_id}/cancel",
    response_model=IngestionJobResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
@handle_ingestion_errors
async def cancel_ingestion_job(
    job_id: UUID,
    caller: CallerIdentity = Depends(require_job_manager),
    manager: IngestionJobManager = Depends(get_ingestion_manager),
) -> IngestionJobResponse:
    """
    Cancel a PENDING or PROCESSING job.

    Raises:
        HTTPException(404): Job not found
        HTTPException(409): Job already COMPLETED, FAILED or CANCELLED
    """
    logger.info("Cancelling ingestion job", extra={"job_id": str(job_id), "user_id": str(caller.id)})
    job = await manager.cancel(job_id)
    return map_job_to_response(job)
