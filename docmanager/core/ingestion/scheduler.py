"""
Background dispatch scheduler.

Runs each dispatch as a fire-and-forget asyncio task, decoupled from the
request that created or retried the job. Dispatches for different jobs run
concurrently; dispatches for the same job id are serialized by a per-job lock.
No external broker (Redis, Celery) is involved.

Dependencies: asyncio
System role: Async execution of job dispatch for the job manager
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DispatchFn = Callable[[uuid.UUID], Awaitable[None]]


class SchedulerClosedError(RuntimeError):
    """Raised when work is scheduled after shutdown began."""


class DispatchScheduler:
    """In-process scheduler for job dispatch coroutines."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()
        self._locks: dict[uuid.UUID, asyncio.Lock] = {}
        self._waiters: dict[uuid.UUID, int] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        """Number of scheduled dispatches not yet finished."""
        return len(self._tasks)

    def schedule(self, job_id: uuid.UUID, dispatch: DispatchFn) -> asyncio.Task:
        """
        Schedule ``dispatch(job_id)`` in the background and return immediately.

        The task inherits the caller's contextvars (correlation id).

        Raises:
            SchedulerClosedError: Scheduler already shut down
        """
        if self._closed:
            raise SchedulerClosedError("Dispatch scheduler is shut down")

        self._waiters[job_id] = self._waiters.get(job_id, 0) + 1
        task = asyncio.create_task(
            self._run(job_id, dispatch), name=f"ingestion-dispatch-{job_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, job_id: uuid.UUID, dispatch: DispatchFn) -> None:
        lock = self._locks.setdefault(job_id, asyncio.Lock())
        try:
            async with lock:
                await dispatch(job_id)
        except asyncio.CancelledError:
            logger.warning("Dispatch cancelled", extra={"job_id": str(job_id)})
            raise
        except Exception:
            logger.exception("Dispatch raised unexpectedly", extra={"job_id": str(job_id)})
        finally:
            remaining = self._waiters.get(job_id, 1) - 1
            if remaining <= 0:
                self._waiters.pop(job_id, None)
                self._locks.pop(job_id, None)
            else:
                self._waiters[job_id] = remaining

    async def wait_idle(self) -> None:
        """Wait until every scheduled dispatch, including ones scheduled meanwhile, finishes."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self, timeout: float = 5.0) -> None:
        """
        Stop accepting work, give in-flight dispatches ``timeout`` seconds,
        then cancel whatever is left.
        """
        self._closed = True
        if not self._tasks:
            return
        pending = list(self._tasks)
        logger.info("Draining dispatch tasks", extra={"in_flight": len(pending)})
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning(
                "Cancelled dispatch tasks at shutdown",
                extra={"cancelled": len(still_running)},
            )
