"""
Ingestion job state machine.

    PENDING    --dispatch-->  PROCESSING
    PROCESSING --success--->  COMPLETED   (terminal)
    PROCESSING --failure--->  FAILED
    FAILED     --retry----->  PENDING     (while retry_count < max_retries)
    PENDING    --cancel---->  CANCELLED   (terminal)
    PROCESSING --cancel---->  CANCELLED   (terminal)

Dependencies: docmanager.core.ingestion.models
System role: Single source of allowed transitions for the job manager and store
"""

from docmanager.core.ingestion.models import IngestionJob, IngestionStatus

TRANSITIONS: dict[IngestionStatus, frozenset[IngestionStatus]] = {
    IngestionStatus.PENDING: frozenset(
        {IngestionStatus.PROCESSING, IngestionStatus.CANCELLED}
    ),
    IngestionStatus.PROCESSING: frozenset(
        {IngestionStatus.COMPLETED, IngestionStatus.FAILED, IngestionStatus.CANCELLED}
    ),
    IngestionStatus.FAILED: frozenset({IngestionStatus.PENDING}),
    IngestionStatus.COMPLETED: frozenset(),
    IngestionStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({IngestionStatus.COMPLETED, IngestionStatus.CANCELLED})
CANCELLABLE_STATUSES = frozenset({IngestionStatus.PENDING, IngestionStatus.PROCESSING})


def sources_for(target: IngestionStatus) -> frozenset[IngestionStatus]:
    """Statuses a job may be in for a write into ``target`` to be legal."""
    return frozenset(src for src, targets in TRANSITIONS.items() if target in targets)


def can_transition(current: IngestionStatus, target: IngestionStatus) -> bool:
    return target in TRANSITIONS[current]


def is_terminal(job: IngestionJob) -> bool:
    return job.is_terminal


def can_retry(job: IngestionJob) -> bool:
    return job.can_retry


def can_cancel(job: IngestionJob) -> bool:
    return job.can_cancel
