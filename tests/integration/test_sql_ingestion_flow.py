"""
End-to-end ingestion flow over the SQL store and gateway.

Runs the job manager against in-memory SQLite with a fake processing
backend and checks both the job row and the mirrored document status.

System role: Verification of the persisted ingestion lifecycle
"""

import uuid

import pytest

from docmanager.boundary.db.CRUD.document_crud import document_crud
from docmanager.boundary.db.document_gateway import SqlDocumentStatusGateway
from docmanager.boundary.db.job_store import SqlJobStore
from docmanager.core.documents import DocumentStatus
from docmanager.core.exceptions import ProcessingFailure
from docmanager.core.ingestion import IngestionJobManager
from docmanager.core.ingestion.models import CreateJobSpec, IngestionStatus, IngestionType


async def insert_document(session_factory) -> uuid.UUID:
    async with session_factory() as session:
        model = await document_crud.create(
            session,
            title="Lecture notes",
            file_name="notes.md",
            file_path="/data/notes.md",
            mime_type="text/markdown",
            file_size=512,
        )
        await session.commit()
        return model.id


@pytest.fixture
async def sql_manager(session_factory, processing_client):
    manager = IngestionJobManager(
        SqlJobStore(session_factory),
        SqlDocumentStatusGateway(session_factory),
        processing_client,
    )
    yield manager
    await manager.shutdown()


class TestSqlIngestionFlow:
    """Test suite for the manager wired to real persistence."""

    async def test_successful_job_marks_document_processed(
        self, session_factory, sql_manager, caller_id
    ) -> None:
        # Arrange
        document_id = await insert_document(session_factory)

        # Act
        job = await sql_manager.create(
            CreateJobSpec(ingestion_type=IngestionType.SINGLE_DOCUMENT, document_id=document_id),
            caller_id=caller_id,
        )
        await sql_manager.scheduler.wait_idle()

        # Assert
        finished = await sql_manager.find_by_id(job.id)
        assert finished.status == IngestionStatus.COMPLETED
        assert finished.progress == 100
        assert finished.version == 3
        meta = await sql_manager.gateway.resolve(document_id)
        assert meta.status == DocumentStatus.PROCESSED

    async def test_failed_job_then_retry(
        self, session_factory, sql_manager, processing_client, caller_id
    ) -> None:
        # Arrange
        document_id = await insert_document(session_factory)
        processing_client.responses.append(
            ProcessingFailure("Processing backend returned HTTP 503: busy", ProcessingFailure.HTTP_STATUS, 503)
        )
        job = await sql_manager.create(
            CreateJobSpec(ingestion_type=IngestionType.REPROCESS, document_id=document_id),
            caller_id=caller_id,
        )
        await sql_manager.scheduler.wait_idle()
        failed = await sql_manager.find_by_id(job.id)
        assert failed.status == IngestionStatus.FAILED
        assert (await sql_manager.gateway.resolve(document_id)).status == DocumentStatus.ERROR

        # Act
        retried = await sql_manager.retry(job.id)
        await sql_manager.scheduler.wait_idle()

        # Assert
        assert retried.retry_count == 1
        finished = await sql_manager.find_by_id(job.id)
        assert finished.status == IngestionStatus.COMPLETED
        assert finished.error_message is None
        assert (await sql_manager.gateway.resolve(document_id)).status == DocumentStatus.PROCESSED
