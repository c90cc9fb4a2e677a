"""
Collaborator contracts consumed by the ingestion job manager.

The manager holds no job state of its own: jobs live behind JobStore,
documents behind DocumentStatusGateway, and the external backend behind
ProcessingClient. Each has a SQLAlchemy/httpx implementation under
docmanager.boundary and can be replaced by an in-memory fake in tests.

Dependencies: docmanager.core
System role: Dependency inversion seam between core and boundary
"""

import uuid
from collections.abc import Collection
from typing import Any, Protocol

from docmanager.core.documents import DocumentMeta, DocumentStatus
from docmanager.core.ingestion.models import (
    IngestionJob,
    IngestionStatus,
    IngestionType,
    JobFilters,
)


class JobStore(Protocol):
    """Durable job records with an atomic conditional write."""

    async def create(self, job: IngestionJob) -> IngestionJob:
        """Persist a new job; returns it with store-assigned timestamps."""
        ...

    async def get(self, job_id: uuid.UUID) -> IngestionJob | None:
        ...

    async def transition(
        self,
        job_id: uuid.UUID,
        expected_statuses: Collection[IngestionStatus],
        expected_version: int | None = None,
        **changes: Any,
    ) -> IngestionJob | None:
        """
        Apply ``changes`` only if the job's current status is in
        ``expected_statuses`` (and its version matches, when given).

        The status check and the write are one atomic operation. Returns the
        updated job, or None when the guard did not match (including a
        missing job); the caller treats None as a no-op.
        """
        ...

    async def query(
        self, filters: JobFilters, offset: int, limit: int
    ) -> tuple[list[IngestionJob], int]:
        """Return one page ordered by created_at descending and the total count."""
        ...

    async def count_by_status(self) -> dict[IngestionStatus, int]:
        ...

    async def count_by_type(self) -> dict[IngestionType, int]:
        ...

    async def completed_durations(self) -> list[float]:
        """Durations in seconds of COMPLETED jobs carrying both timestamps."""
        ...

    async def find_stale_processing(self, started_before) -> list[IngestionJob]:
        """PROCESSING jobs whose started_at is older than ``started_before``."""
        ...


class DocumentStatusGateway(Protocol):
    """Document lookup and best-effort status mirroring."""

    async def resolve(self, document_id: uuid.UUID) -> DocumentMeta:
        """Raises DocumentNotFoundError when the id does not resolve."""
        ...

    async def set_status(self, document_id: uuid.UUID, status: DocumentStatus) -> None:
        ...


class ProcessingClient(Protocol):
    """External document-processing backend."""

    async def submit(self, payload: dict[str, Any], timeout: float | None = None) -> Any:
        """
        Submit one ingestion payload.

        Returns the decoded backend response on success; raises
        ProcessingFailure on timeout, transport error, or non-2xx status.
        """
        ...
