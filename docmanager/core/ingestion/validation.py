"""
Create-request validation for ingestion jobs.

Every check, including resolution of each referenced document, runs
before anything is persisted: a job is either fully valid or not created.

Dependencies: docmanager.core.ingestion, docmanager.core.exceptions
System role: Gatekeeper for IngestionJobManager.create
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from docmanager.core.exceptions import DocumentNotFoundError, ValidationError
from docmanager.core.ingestion.models import (
    CreateJobSpec,
    IngestionJob,
    IngestionStatus,
    IngestionType,
)
from docmanager.core.ingestion.ports import DocumentStatusGateway

logger = logging.getLogger(__name__)

# Types whose payload is built from a single documentId
SINGLE_REFERENCE_TYPES = frozenset({IngestionType.SINGLE_DOCUMENT, IngestionType.REPROCESS})


def parse_ingestion_type(raw: IngestionType | str | None) -> IngestionType:
    """
    Coerce a raw ingestion type into the enum.

    Raises:
        ValidationError: Missing or unrecognized value
    """
    if raw is None or raw == "":
        raise ValidationError("Ingestion type is required", field="ingestion_type")
    if isinstance(raw, IngestionType):
        return raw
    try:
        return IngestionType(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in IngestionType)
        raise ValidationError(
            f"Invalid ingestion type '{raw}'; expected one of: {allowed}",
            field="ingestion_type",
        ) from None


def _coerce_uuid(value: Any, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"'{value}' is not a valid UUID", field=field) from None


def _validate_max_retries(value: int | None, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError("maxRetries must be a non-negative integer", field="max_retries")
    return value


def _validate_configuration(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError("Configuration must be an object", field="configuration")
    return dict(value)


async def _resolve_single(spec: CreateJobSpec, gateway: DocumentStatusGateway) -> uuid.UUID:
    if spec.document_id is None:
        raise ValidationError(
            "Document ID is required for single document ingestion",
            field="document_id",
        )
    document_id = _coerce_uuid(spec.document_id, "document_id")
    await gateway.resolve(document_id)
    return document_id


async def _resolve_batch(
    spec: CreateJobSpec, gateway: DocumentStatusGateway
) -> list[uuid.UUID]:
    if not spec.document_ids:
        raise ValidationError(
            "Document IDs are required for batch ingestion",
            field="document_ids",
        )
    document_ids = [_coerce_uuid(value, "document_ids") for value in spec.document_ids]
    if len(set(document_ids)) != len(document_ids):
        raise ValidationError("Document IDs must not contain duplicates", field="document_ids")

    missing: list[uuid.UUID] = []
    for document_id in document_ids:
        try:
            await gateway.resolve(document_id)
        except DocumentNotFoundError:
            missing.append(document_id)

    if missing:
        logger.info(
            "Batch ingestion rejected: unresolved documents",
            extra={"missing_count": len(missing), "requested_count": len(document_ids)},
        )
        raise DocumentNotFoundError(
            missing[0],
            details={"missing_document_ids": [str(doc_id) for doc_id in missing]},
        )
    return document_ids


async def validate_create_spec(
    spec: CreateJobSpec,
    gateway: DocumentStatusGateway,
    default_max_retries: int = 3,
) -> IngestionJob:
    """
    Validate a create request and build the PENDING job to persist.

    Args:
        spec: Raw create request
        gateway: Document gateway used to resolve every referenced document
        default_max_retries: Applied when the request does not set max_retries

    Returns:
        IngestionJob: Unsaved job in PENDING with retry_count 0

    Raises:
        ValidationError: Bad enum, missing reference field, malformed values
        DocumentNotFoundError: A referenced document does not resolve
    """
    ingestion_type = parse_ingestion_type(spec.ingestion_type)
    max_retries = _validate_max_retries(spec.max_retries, default_max_retries)
    configuration = _validate_configuration(spec.configuration)

    document_id: uuid.UUID | None = None
    document_ids: list[uuid.UUID] = []
    if ingestion_type in SINGLE_REFERENCE_TYPES:
        document_id = await _resolve_single(spec, gateway)
    else:
        document_ids = await _resolve_batch(spec, gateway)

    return IngestionJob(
        id=uuid.uuid4(),
        ingestion_type=ingestion_type,
        status=IngestionStatus.PENDING,
        name=spec.name,
        description=spec.description,
        document_id=document_id,
        document_ids=document_ids,
        configuration=configuration,
        progress=0,
        retry_count=0,
        max_retries=max_retries,
    )
