"""SQLAlchemy-backed job queue."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

from ..db.db_models import JobModel
from ..domain.models import Job, JobStatus, Operation
from ..exceptions import JobNotFoundError, QueueUnavailableError
from .job_repository import JobRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class SqlAlchemyJobQueue(JobRepository):
    """Concrete repository storing jobs in the ``distribution_job`` table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    # Public API ---------------------------------------------------------

    def create_job(
        self,
        job_type: str,
        operation: Operation,
        arguments: Sequence[str],
        *,
        now: datetime | None = None,
    ) -> Job:
        job = Job(
            id=uuid4(),
            job_type=job_type,
            operation=operation,
            arguments=list(arguments),
            status=JobStatus.QUEUED,
            created_at=now or _utcnow(),
        )
        with self._session() as session:
            session.add(
                JobModel(
                    id=str(job.id),
                    job_type=job.job_type,
                    operation=job.operation.value,
                    arguments_json=json.dumps(job.arguments),
                    status=job.status.value,
                    created_at=job.created_at,
                )
            )
            session.commit()
        logger.info(
            "queue.job.created",
            extra={"job_id": str(job.id), "operation": operation.value},
        )
        return job

    def get_job(self, job_id: UUID) -> Job:
        with self._session() as session:
            model = session.get(JobModel, str(job_id))
            if model is None:
                raise JobNotFoundError(f"Job '{job_id}' not found")
            return self._to_domain(model)

    def acquire_next(self, *, now: datetime | None = None) -> Job | None:
        started_at = now or _utcnow()
        with self._session() as session:
            candidates = session.scalars(
                select(JobModel.id)
                .where(JobModel.status == JobStatus.QUEUED.value)
                .order_by(JobModel.created_at)
                .limit(5)
            ).all()
            for job_id in candidates:
                claimed = session.execute(
                    update(JobModel)
                    .where(JobModel.id == job_id, JobModel.status == JobStatus.QUEUED.value)
                    .values(status=JobStatus.RUNNING.value, started_at=started_at)
                )
                session.commit()
                if claimed.rowcount == 1:
                    model = session.get(JobModel, job_id, populate_existing=True)
                    if model is not None:
                        return self._to_domain(model)
        return None

    def mark_succeeded(
        self, job: Job, payload: str | None, *, now: datetime | None = None
    ) -> Job:
        return self._finish(job, JobStatus.SUCCEEDED, payload=payload, detail=None, now=now)

    def mark_failed(self, job: Job, detail: str, *, now: datetime | None = None) -> Job:
        return self._finish(job, JobStatus.FAILED, payload=None, detail=detail, now=now)

    def list_jobs(self, *, status: JobStatus | None = None, limit: int = 100) -> list[Job]:
        statement = select(JobModel).order_by(JobModel.created_at).limit(limit)
        if status is not None:
            statement = statement.where(JobModel.status == status.value)
        with self._session() as session:
            return [self._to_domain(model) for model in session.scalars(statement)]

    # Helpers ------------------------------------------------------------

    def _finish(
        self,
        job: Job,
        status: JobStatus,
        *,
        payload: str | None,
        detail: str | None,
        now: datetime | None,
    ) -> Job:
        finished_at = now or _utcnow()
        with self._session() as session:
            model = session.get(JobModel, str(job.id))
            if model is None:
                raise JobNotFoundError(f"Job '{job.id}' not found")
            if JobStatus(model.status).is_terminal:
                raise ValueError(f"Job '{job.id}' already finished as {model.status}")
            model.status = status.value
            model.payload = payload
            model.failure_detail = detail
            model.finished_at = finished_at
            session.commit()
            return self._to_domain(model)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._session_factory() as session:
                yield session
        except sa_exc.OperationalError as exc:
            raise QueueUnavailableError("job queue database is unavailable") from exc

    @staticmethod
    def _to_domain(model: JobModel) -> Job:
        return Job(
            id=UUID(model.id),
            job_type=model.job_type,
            operation=Operation.parse(model.operation),
            arguments=list(json.loads(model.arguments_json)),
            status=JobStatus(model.status),
            created_at=_aware(model.created_at),
            started_at=_aware(model.started_at),
            finished_at=_aware(model.finished_at),
            payload=model.payload,
            failure_detail=model.failure_detail,
        )


__all__ = ["SqlAlchemyJobQueue"]
