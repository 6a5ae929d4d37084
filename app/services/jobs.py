"""In-process registry of background processing jobs."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from app.storage.records import new_id

logger = logging.getLogger("audiomind")


class JobState(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


FINISHED_STATES = {JobState.SUCCEEDED, JobState.FAILED, JobState.CANCELLED}

JOB_FAILED_MESSAGE = "Processing failed"
MAX_FINISHED_JOBS = 500


class JobCancelled(Exception):
    """Raised by a job handler when it stops because cancellation was requested."""


class JobFailed(Exception):
    """Raised by a job handler with a message that is safe to show on the job."""


@dataclass
class Job:
    """One run of the ingestion pipeline for one audio item."""

    content_id: str
    user_id: str
    id: str = field(default_factory=new_id)
    state: JobState = JobState.QUEUED
    error: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def cancel_requested(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def finished(self) -> bool:
        return self.state in FINISHED_STATES


class JobManager:
    """Tracks jobs and runs them, one handler call per job.

    Nothing limits how many jobs run at once and identical uploads are not
    deduplicated.
    """

    def __init__(self, max_finished: int = MAX_FINISHED_JOBS) -> None:
        self.max_finished = max_finished
        self._jobs: dict[str, Job] = {}

    def create(self, content_id: str, user_id: str) -> Job:
        self._prune()
        job = Job(content_id=content_id, user_id=user_id)
        self._jobs[job.id] = job
        logger.info("Job %s queued for content %s", job.id, content_id)
        return job

    def _prune(self) -> None:
        """Forget the oldest finished jobs beyond the retention limit."""
        finished = [j for j in self._jobs.values() if j.finished]
        excess = len(finished) - self.max_finished
        if excess <= 0:
            return
        for job in sorted(finished, key=lambda j: j.finished_at or j.created_at)[:excess]:
            del self._jobs[job.id]
        logger.debug("Pruned %d finished jobs", excess)

    def get(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def for_content(self, content_id: str) -> list[Job]:
        return [j for j in self._jobs.values() if j.content_id == content_id]

    def cancel(self, job_id: str) -> Job | None:
        """Signal cancellation. The handler notices at its next checkpoint."""
        job = self._jobs.get(job_id)
        if job is None:
            return None
        if not job.finished:
            job.cancel_event.set()
            logger.info("Cancellation requested for job %s", job_id)
        return job

    async def run(self, job: Job, handler: Callable[[Job], Awaitable[None]]) -> None:
        """Run a job to completion. Never raises: outcomes are recorded on the job.

        The handler is called even if cancellation was requested while queued,
        so it can record the cancellation on its own records.
        """
        job.state = JobState.RUNNING
        job.started_at = datetime.utcnow()
        try:
            await handler(job)
        except JobCancelled:
            job.state = JobState.CANCELLED
            logger.info("Job %s cancelled", job.id)
        except JobFailed as e:
            job.state = JobState.FAILED
            job.error = str(e)
            logger.warning("Job %s failed: %s", job.id, e)
        except Exception:
            job.state = JobState.FAILED
            job.error = JOB_FAILED_MESSAGE
            logger.exception("Job %s failed", job.id)
        else:
            job.state = JobState.SUCCEEDED
            logger.info("Job %s finished: %s", job.id, job.state.value)
        finally:
            job.finished_at = datetime.utcnow()
