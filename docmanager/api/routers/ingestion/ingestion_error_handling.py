"""
Ingestion error handling utilities.

Decorator that maps domain exceptions raised by the job manager onto
HTTP responses, with one log line per refused or failed request.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from docmanager.core.exceptions import (
    DocManagerException,
    InvalidStateError,
    NotFoundError,
    ServiceUnavailableError,
    StoreError,
    ValidationError,
)
from docmanager.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_ingestion_errors(func: F) -> F:
    """
    Decorator to transform ingestion errors into HTTPExceptions.

    ValidationError -> 400, NotFoundError -> 404,
    InvalidStateError -> 409 with the job's current status,
    ServiceUnavailableError -> 503 during shutdown,
    StoreError and anything unexpected -> 500.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except ValidationError as e:
            log_with_context(
                logger, logging.WARNING, "Invalid ingestion request", error=e.message, **e.details
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except NotFoundError as e:
            log_with_context(logger, logging.WARNING, "Resource not found", error=e.message, **e.details)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except InvalidStateError as e:
            log_with_context(
                logger,
                logging.WARNING,
                "Operation not allowed in current job state",
                job_id=e.job_id,
                current_status=e.current_status,
                operation=e.operation,
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"message": e.message, "current_status": e.current_status},
            )

        except StoreError as e:
            log_with_context(logger, logging.ERROR, "Job store failure", error=e.message, **e.details)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Storage failure while processing the request",
            )

        except ServiceUnavailableError as e:
            log_with_context(logger, logging.WARNING, "Ingestion unavailable", error=e.message, **e.details)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

        except HTTPException:
            raise

        except DocManagerException as e:
            log_exception_with_context(logger, "Unhandled application error", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=e.message,
            )

        except Exception as e:
            log_exception_with_context(logger, "Unexpected failure in ingestion operation", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An internal error occurred during ingestion operation",
            )

    return wrapper  # type: ignore
