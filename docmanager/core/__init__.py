"""
Core business logic module.

Contains the ingestion job lifecycle and the exception hierarchy.
All business rules and domain-specific logic reside here.
"""

from docmanager.core.exceptions import (
    DocManagerException,
    DocumentNotFoundError,
    InvalidStateError,
    JobNotFoundError,
    NotFoundError,
    ProcessingFailure,
    ServiceUnavailableError,
    StoreError,
    ValidationError,
)

__all__ = [
    "DocManagerException",
    "DocumentNotFoundError",
    "InvalidStateError",
    "JobNotFoundError",
    "NotFoundError",
    "ProcessingFailure",
    "ServiceUnavailableError",
    "StoreError",
    "ValidationError",
]
