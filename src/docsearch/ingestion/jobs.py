"""Background indexing jobs with observable status and cooperative cancellation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CancellationToken:
    """Flag checked by long-running walks between units of work."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class IndexJob:
    """One fire-and-forget indexing run.

    Attributes
    ----------
    job_id:
        Opaque identifier handed back to the caller.
    status:
        Current :class:`JobStatus`.
    count:
        Documents indexed; set when the run finishes (including cancelled
        runs, which report what they completed).
    error:
        Error message for failed runs.
    """

    job_id: str = field(default_factory=lambda: uuid4().hex[:12])
    status: JobStatus = JobStatus.PENDING
    count: int | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    token: CancellationToken = field(default_factory=CancellationToken, repr=False)
    task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def done(self) -> bool:
        return self.status in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELLED)

    def cancel(self) -> bool:
        """Request cancellation.  Returns ``False`` if the job already finished."""
        if self.done:
            return False
        self.token.cancel()
        return True

    def as_dict(self) -> dict:
        return {
            "jobId": self.job_id,
            "status": self.status.value,
            "count": self.count,
            "error": self.error,
            "createdAt": self.created_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        }

    async def _run(self, work: Callable[[CancellationToken], Awaitable[int]]) -> None:
        self.status = JobStatus.RUNNING
        try:
            self.count = await work(self.token)
        except Exception as exc:
            logger.exception("Indexing job %s failed", self.job_id)
            self.status = JobStatus.FAILED
            self.error = str(exc) or type(exc).__name__
        else:
            self.status = JobStatus.CANCELLED if self.token.cancelled else JobStatus.SUCCEEDED
            logger.info("Indexing job %s %s: %d document(s)", self.job_id, self.status.value, self.count)
        finally:
            self.finished_at = datetime.now(timezone.utc)


class JobRegistry:
    """Keeps track of indexing jobs started in this process.

    Jobs are scheduled as detached :mod:`asyncio` tasks; :meth:`start`
    returns as soon as the task is created.
    """

    def __init__(self, max_history: int = 50) -> None:
        self._jobs: dict[str, IndexJob] = {}
        self._max_history = max_history

    def start(self, work: Callable[[CancellationToken], Awaitable[int]]) -> IndexJob:
        """Schedule *work* on the running event loop and return its job."""
        job = IndexJob()
        job.task = asyncio.get_running_loop().create_task(job._run(work))
        self._jobs[job.job_id] = job
        self._prune()
        logger.info("Started indexing job %s", job.job_id)
        return job

    def get(self, job_id: str) -> IndexJob | None:
        return self._jobs.get(job_id)

    def latest(self) -> IndexJob | None:
        if not self._jobs:
            return None
        return next(reversed(self._jobs.values()))

    def jobs(self) -> list[IndexJob]:
        return list(self._jobs.values())

    def _prune(self) -> None:
        finished = [job_id for job_id, job in self._jobs.items() if job.done]
        while len(self._jobs) > self._max_history and finished:
            del self._jobs[finished.pop(0)]
