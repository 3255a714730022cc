"""Repository interface for the distribution job queue."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence
from uuid import UUID

from ..domain.models import Job, JobStatus, Operation


class JobRepository:
    """Persistence gateway for queue operations.

    A job is created ``queued``, moves to ``running`` exactly once when a worker
    acquires it and then to ``succeeded`` or ``failed``. Terminal jobs are never
    picked up again.
    """

    def create_job(
        self,
        job_type: str,
        operation: Operation,
        arguments: Sequence[str],
        *,
        now: datetime | None = None,
    ) -> Job:
        """Persist a new queued job and return it."""

        raise NotImplementedError

    def get_job(self, job_id: UUID) -> Job:
        """Return the job or raise :class:`JobNotFoundError`."""

        raise NotImplementedError

    def acquire_next(self, *, now: datetime | None = None) -> Job | None:
        """Claim the oldest queued job by moving it to ``running``."""

        raise NotImplementedError

    def mark_succeeded(
        self, job: Job, payload: str | None, *, now: datetime | None = None
    ) -> Job:
        raise NotImplementedError

    def mark_failed(self, job: Job, detail: str, *, now: datetime | None = None) -> Job:
        raise NotImplementedError

    def list_jobs(self, *, status: JobStatus | None = None, limit: int = 100) -> list[Job]:
        raise NotImplementedError
