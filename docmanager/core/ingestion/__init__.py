"""
Ingestion job lifecycle.

Exports:
  - IngestionJobManager: create/dispatch/retry/cancel/query orchestration
  - DispatchScheduler: in-process background dispatch
  - StaleJobSweeper: recovery of jobs stuck in PROCESSING
  - IngestionJob, IngestionStatus, IngestionType and request/response value objects
  - JobStore, DocumentStatusGateway, ProcessingClient: collaborator protocols
"""

from docmanager.core.ingestion.job_manager import IngestionJobManager
from docmanager.core.ingestion.models import (
    CreateJobSpec,
    IngestionJob,
    IngestionStats,
    IngestionStatus,
    IngestionType,
    JobFilters,
    JobPage,
)
from docmanager.core.ingestion.ports import (
    DocumentStatusGateway,
    JobStore,
    ProcessingClient,
)
from docmanager.core.ingestion.recovery import StaleJobSweeper
from docmanager.core.ingestion.scheduler import DispatchScheduler

__all__ = [
    "CreateJobSpec",
    "DispatchScheduler",
    "DocumentStatusGateway",
    "IngestionJob",
    "IngestionJobManager",
    "IngestionStats",
    "IngestionStatus",
    "IngestionType",
    "JobFilters",
    "JobPage",
    "JobStore",
    "ProcessingClient",
    "StaleJobSweeper",
]
