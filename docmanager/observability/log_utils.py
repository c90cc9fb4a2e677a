"""
Structured logging helpers.

Every value passed as log context goes through safe_log_value, so a huge
result payload or an unprintable object never breaks a log call. Job
lifecycle events share one set of fields (job_id, ingestion_type, status,
retry_count) through job_log_context.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any

MAX_LOG_VALUE_LENGTH = 500


def safe_log_value(value: Any, max_length: int = MAX_LOG_VALUE_LENGTH) -> str:
    """
    Render ``value`` as a bounded string for a log record.

    Collections are reported by size, enums by value.
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, str):
            text = value
        elif isinstance(value, (list, tuple, set, frozenset)):
            text = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            text = f"dict({len(value)} keys)"
        else:
            text = str(getattr(value, "value", value))
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"

    if len(text) > max_length:
        return f"{text[:max_length]}... (truncated, {len(text)} total)"
    return text


def job_log_context(job: Any, **context: Any) -> dict[str, str]:
    """
    Standard fields for a log record about one ingestion job.

    Args:
        job: IngestionJob snapshot
        **context: Event-specific fields, which win over the standard ones

    Returns:
        dict: Safe ``extra`` mapping
    """
    fields: dict[str, Any] = {
        "job_id": job.id,
        "ingestion_type": job.ingestion_type,
        "job_status": job.status,
        "retry_count": job.retry_count,
    }
    fields.update(context)
    return {key: safe_log_value(value) for key, value in fields.items()}


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    logger.log(level, message, extra={key: safe_log_value(val) for key, val in context.items()})


def log_job_event(
    logger: logging.Logger, level: int, message: str, job: Any, **context: Any
) -> None:
    """Log a lifecycle event for ``job`` with the standard job fields attached."""
    logger.log(level, message, extra=job_log_context(job, **context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log ``exc`` with traceback plus its type and message as fields.

    Must be called from an ``except`` block.
    """
    extra = {key: safe_log_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.exception(message, extra=extra)
