"""
Exception hierarchy for the document management backend.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class DocManagerException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(DocManagerException):
    """Raised when a request is malformed or incomplete."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        self.field = field
        super().__init__(message, details)


class NotFoundError(DocManagerException):
    """Raised when a referenced resource does not exist."""

    resource = "Resource"

    def __init__(self, resource_id: Any, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details[f"{self.resource.lower()}_id"] = str(resource_id)
        self.resource_id = resource_id
        super().__init__(f"{self.resource} not found: {resource_id}", details)


class JobNotFoundError(NotFoundError):
    """Raised when an ingestion job id does not resolve."""

    resource = "Job"


class DocumentNotFoundError(NotFoundError):
    """Raised when a document id does not resolve through the gateway."""

    resource = "Document"


class InvalidStateError(DocManagerException):
    """Raised when an operation is not allowed from the job's current status."""

    def __init__(
        self,
        job_id: Any,
        current_status: str,
        operation: str,
        reason: str | None = None,
    ) -> None:
        """
        Initialize invalid state error.

        Args:
            job_id: Job the operation targeted
            current_status: Status the job was in when the operation was refused
            operation: Refused operation name (retry, cancel)
            reason: Optional explanation beyond the status itself
        """
        self.job_id = job_id
        self.current_status = current_status
        self.operation = operation
        message = f"Cannot {operation} job {job_id} in status '{current_status}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            {"job_id": str(job_id), "current_status": current_status, "operation": operation},
        )


class ProcessingFailure(DocManagerException):
    """Raised when the external processing backend call fails."""

    TIMEOUT = "timeout"
    CONNECTION = "connection"
    HTTP_STATUS = "http_status"
    INVALID_RESPONSE = "invalid_response"

    def __init__(
        self,
        reason: str,
        kind: str,
        status_code: int | None = None,
    ) -> None:
        """
        Initialize processing failure.

        Args:
            reason: Human-readable failure reason recorded on the job
            kind: Failure classification (timeout, connection, http_status, invalid_response)
            status_code: HTTP status for http_status failures
        """
        details: dict[str, Any] = {"kind": kind}
        if status_code is not None:
            details["status_code"] = status_code
        self.reason = reason
        self.kind = kind
        self.status_code = status_code
        super().__init__(reason, details)


class StoreError(DocManagerException):
    """Raised when the persistence layer fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize store error.

        Args:
            message: Error message
            operation: Store operation that failed (create, transition, query)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class ServiceUnavailableError(DocManagerException):
    """Raised when the manager is shutting down and no longer accepts work."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Ingestion is shutting down; cannot {operation} jobs",
            {"operation": operation},
        )
