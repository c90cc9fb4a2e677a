"""
Document ORM model.

Represents stored documents with processing status and metadata.
The ingestion core reads metadata from it and mirrors job state onto status.

Dependencies: sqlalchemy, docmanager.boundary.db.base
System role: Document persistence for ingestion tracking
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from docmanager.boundary.db.base import Base, TimestampMixin, UUIDMixin, enum_values
from docmanager.core.documents import DocumentStatus, DocumentType


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model tracking ingestion state.

    Lifecycle: Upload (UPLOADED) → ingestion job running (PROCESSING) →
    PROCESSED on job completion or ERROR on job failure.

    Attributes:
        id: UUID primary key (auto-generated)
        title: Display title (255 char limit)
        description: Optional free text
        file_name: Original filename
        file_path: Storage path or URL of the raw file (1024 char limit)
        mime_type: MIME type reported at upload
        file_size: Size in bytes
        document_type: Coarse format classification
        status: Current processing state
        last_processed_at: Set whenever status becomes PROCESSED
        created_at: Upload timestamp (UTC)
        updated_at: Last change timestamp (UTC)
    """

    __tablename__ = "documents"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Display title",
    )

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    file_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Original filename",
    )

    file_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        doc="Storage path or URL for raw document",
    )

    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)

    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    document_type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType, native_enum=False, values_callable=enum_values, length=32),
        nullable=False,
        default=DocumentType.OTHER,
    )

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False, values_callable=enum_values, length=32),
        nullable=False,
        default=DocumentStatus.UPLOADED,
    )

    last_processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
