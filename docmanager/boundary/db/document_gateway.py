"""
SQLAlchemy-backed document status gateway.

Resolves document metadata for validation and payload building, and
writes mirrored statuses onto the documents table.

Dependencies: sqlalchemy, docmanager.boundary.db.CRUD, docmanager.core
System role: Document lookup and status mirroring for the ingestion core
"""

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from docmanager.boundary.db.CRUD.document_crud import document_crud
from docmanager.core.documents import DocumentMeta, DocumentStatus
from docmanager.core.exceptions import DocumentNotFoundError, StoreError

logger = logging.getLogger(__name__)


class SqlDocumentStatusGateway:
    """DocumentStatusGateway backed by the documents table."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self.session_factory = session_factory

    async def resolve(self, document_id: uuid.UUID) -> DocumentMeta:
        """
        Load document metadata.

        Raises:
            DocumentNotFoundError: No document with this id
            StoreError: Database failure
        """
        try:
            async with self.session_factory() as session:
                model = await document_crud.get_by_id(session, document_id)
        except SQLAlchemyError as e:
            logger.error(
                "Document lookup failed",
                extra={"document_id": str(document_id), "error": str(e)},
            )
            raise StoreError("Document lookup failed", operation="resolve") from e

        if model is None:
            raise DocumentNotFoundError(document_id)

        return DocumentMeta(
            id=model.id,
            title=model.title,
            file_path=model.file_path,
            mime_type=model.mime_type,
            file_size=model.file_size,
            status=DocumentStatus(model.status),
        )

    async def set_status(self, document_id: uuid.UUID, status: DocumentStatus) -> None:
        """
        Write a mirrored status.

        Raises:
            DocumentNotFoundError: Document was deleted meanwhile
            StoreError: Database failure
        """
        async with self.session_factory() as session:
            try:
                model = await document_crud.update_status(session, document_id, status)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError("Document status update failed", operation="set_status") from e

        if model is None:
            raise DocumentNotFoundError(document_id)
        logger.debug(
            "Document status updated",
            extra={"document_id": str(document_id), "document_status": status.value},
        )
