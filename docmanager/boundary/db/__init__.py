"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(): Async connection management
  - IngestionJobModel, DocumentModel: Persisted entities
  - SqlJobStore, SqlDocumentStatusGateway: Ingestion core adapters

Dependencies: sqlalchemy, docmanager.configs
System role: Database adapter providing persistent storage for ingestion
jobs and documents.
"""

from docmanager.boundary.db.base import Base, TimestampMixin, UUIDMixin
from docmanager.boundary.db.connection import get_async_engine, get_async_session_factory
from docmanager.boundary.db.document_gateway import SqlDocumentStatusGateway
from docmanager.boundary.db.job_store import SqlJobStore
from docmanager.boundary.db.models import DocumentModel, IngestionJobModel

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_async_engine",
    "get_async_session_factory",
    "DocumentModel",
    "IngestionJobModel",
    "SqlDocumentStatusGateway",
    "SqlJobStore",
]
