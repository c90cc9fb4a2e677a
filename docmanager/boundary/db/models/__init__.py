"""
Database models package.

Exports:
  - IngestionJobModel: Ingestion job ORM model
  - DocumentModel: Document ORM model

Dependencies: sqlalchemy, docmanager.boundary.db.base
System role: Database model definitions for domain entities
"""

from docmanager.boundary.db.models.document_model import DocumentModel
from docmanager.boundary.db.models.job_model import IngestionJobModel

__all__ = [
    "DocumentModel",
    "IngestionJobModel",
]
