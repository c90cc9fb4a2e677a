"""
Test suite for SqlDocumentStatusGateway against in-memory SQLite.

System role: Verification of document lookup and status mirroring
"""

import uuid

import pytest

from docmanager.boundary.db.CRUD.document_crud import document_crud
from docmanager.boundary.db.document_gateway import SqlDocumentStatusGateway
from docmanager.core.documents import DocumentMeta, DocumentStatus
from docmanager.core.exceptions import DocumentNotFoundError


async def insert_document(session_factory, **fields) -> uuid.UUID:
    values = dict(
        title="Quarterly report",
        file_name="report.pdf",
        file_path="/data/report.pdf",
        mime_type="application/pdf",
        file_size=2048,
    )
    values.update(fields)
    async with session_factory() as session:
        model = await document_crud.create(session, **values)
        await session.commit()
        return model.id


@pytest.fixture
def sql_gateway(session_factory) -> SqlDocumentStatusGateway:
    return SqlDocumentStatusGateway(session_factory)


class TestResolve:
    """Test suite for resolve()."""

    async def test_resolve_returns_metadata(self, session_factory, sql_gateway) -> None:
        # Arrange
        document_id = await insert_document(session_factory)

        # Act
        meta = await sql_gateway.resolve(document_id)

        # Assert
        assert meta == DocumentMeta(
            id=document_id,
            title="Quarterly report",
            file_path="/data/report.pdf",
            mime_type="application/pdf",
            file_size=2048,
            status=DocumentStatus.UPLOADED,
        )

    async def test_resolve_unknown_raises(self, sql_gateway) -> None:
        missing = uuid.uuid4()

        with pytest.raises(DocumentNotFoundError) as exc_info:
            await sql_gateway.resolve(missing)

        assert exc_info.value.resource_id == missing


class TestSetStatus:
    """Test suite for set_status()."""

    async def test_set_status_persists(self, session_factory, sql_gateway) -> None:
        document_id = await insert_document(session_factory)

        await sql_gateway.set_status(document_id, DocumentStatus.PROCESSING)

        assert (await sql_gateway.resolve(document_id)).status == DocumentStatus.PROCESSING

    async def test_processed_stamps_last_processed_at(
        self, session_factory, sql_gateway
    ) -> None:
        document_id = await insert_document(session_factory)

        await sql_gateway.set_status(document_id, DocumentStatus.PROCESSED)

        async with session_factory() as session:
            model = await document_crud.get_by_id(session, document_id)
        assert model.status == DocumentStatus.PROCESSED
        assert model.last_processed_at is not None

    async def test_error_leaves_last_processed_at_unset(
        self, session_factory, sql_gateway
    ) -> None:
        document_id = await insert_document(session_factory)

        await sql_gateway.set_status(document_id, DocumentStatus.ERROR)

        async with session_factory() as session:
            model = await document_crud.get_by_id(session, document_id)
        assert model.last_processed_at is None

    async def test_set_status_unknown_raises(self, sql_gateway) -> None:
        with pytest.raises(DocumentNotFoundError):
            await sql_gateway.set_status(uuid.uuid4(), DocumentStatus.ERROR)
