"""
Processing backend payload construction.

Wire format:
    {
        "job_id": str,
        "ingestion_type": str,
        "configuration": object,
        "document": {id, title, file_path, mime_type, file_size},      # single/reprocess
        "documents": [{id, title, file_path, mime_type, file_size}]     # batch
    }

Dependencies: docmanager.core.ingestion
System role: Maps a job onto the processing backend's request body
"""

from typing import Any

from docmanager.core.documents import DocumentMeta
from docmanager.core.ingestion.models import IngestionJob, IngestionType
from docmanager.core.ingestion.ports import DocumentStatusGateway


async def resolve_documents(
    job: IngestionJob, gateway: DocumentStatusGateway
) -> list[DocumentMeta]:
    """
    Resolve metadata for every document ``job`` references, in order.

    Runs at dispatch time, so a document removed after the job was created
    raises DocumentNotFoundError here.
    """
    return [await gateway.resolve(document_id) for document_id in job.referenced_document_ids]


def build_payload(job: IngestionJob, documents: list[DocumentMeta]) -> dict[str, Any]:
    """Build the submission body for ``job`` from its resolved documents."""
    payload: dict[str, Any] = {
        "job_id": str(job.id),
        "ingestion_type": job.ingestion_type.value,
        "configuration": dict(job.configuration or {}),
    }

    if job.ingestion_type == IngestionType.BATCH_DOCUMENTS:
        payload["documents"] = [meta.to_payload() for meta in documents]
    elif documents:
        payload["document"] = documents[0].to_payload()

    return payload
