"""
Document domain types seen by the ingestion core.

The core never owns documents; it only resolves their metadata and
mirrors job state onto their status through the document gateway.

Dependencies: None (pure domain layer)
System role: Document reference types shared by core and boundary
"""

import enum
import uuid
from dataclasses import dataclass


class DocumentStatus(str, enum.Enum):
    """
    Document processing lifecycle states.

    UPLOADED: Stored and awaiting ingestion
    PROCESSING: An ingestion job is running against it
    PROCESSED: Last ingestion job completed
    ERROR: Last ingestion job failed
    """

    UPLOADED = "uploaded"
    PROCESSING = "processing"
    PROCESSED = "processed"
    ERROR = "error"


class DocumentType(str, enum.Enum):
    """Coarse document format classification."""

    PDF = "pdf"
    WORD = "word"
    TEXT = "text"
    HTML = "html"
    MARKDOWN = "markdown"
    OTHER = "other"


@dataclass(frozen=True)
class DocumentMeta:
    """Metadata forwarded to the processing backend for one document."""

    id: uuid.UUID
    title: str
    file_path: str
    mime_type: str
    file_size: int
    status: DocumentStatus = DocumentStatus.UPLOADED

    def to_payload(self) -> dict:
        """Wire representation used in processing payloads."""
        return {
            "id": str(self.id),
            "title": self.title,
            "file_path": self.file_path,
            "mime_type": self.mime_type,
            "file_size": self.file_size,
        }
