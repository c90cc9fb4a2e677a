"""
Document CRUD operations.

Provides Create, Read, Update operations for DocumentModel
with the status update used by ingestion job mirroring.

Dependencies: sqlalchemy, docmanager.boundary.db.models.document_model
System role: Document persistence operations
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from docmanager.boundary.db.base import utcnow
from docmanager.boundary.db.CRUD.base_crud import BaseCRUD
from docmanager.boundary.db.models.document_model import DocumentModel
from docmanager.core.documents import DocumentStatus


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with status tracking for ingestion mirroring.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def update_status(
        self,
        session: AsyncSession,
        id: UUID,
        status: DocumentStatus,
    ) -> DocumentModel | None:
        """
        Update document processing status.

        PROCESSED also stamps last_processed_at.

        Args:
            session: Async database session
            id: Document UUID
            status: New processing status

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        update_fields: dict = {"status": status, "updated_at": utcnow()}
        if status == DocumentStatus.PROCESSED:
            update_fields["last_processed_at"] = utcnow()
        return await self.update_by_id(session, id, **update_fields)


document_crud = DocumentCRUD()
