"""
Observability module.

Provides logging configuration, correlation ID tracking,
request logging middleware and safe structured-logging helpers.
"""

from docmanager.observability.correlation import get_correlation_id, set_correlation_id
from docmanager.observability.logger import configure_logging

__all__ = [
    "configure_logging",
    "get_correlation_id",
    "set_correlation_id",
]
