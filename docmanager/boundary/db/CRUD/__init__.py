"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from docmanager.boundary.db.CRUD import ingestion_job_crud, document_crud

    job = await ingestion_job_crud.get_by_id(db, job_id)
"""

from docmanager.boundary.db.CRUD.base_crud import BaseCRUD
from docmanager.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from docmanager.boundary.db.CRUD.job_crud import IngestionJobCRUD, ingestion_job_crud

__all__ = [
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
    "IngestionJobCRUD",
    "ingestion_job_crud",
]
