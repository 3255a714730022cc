"""Infrastructure adapters and repository contracts."""

from __future__ import annotations

from .job_queue import SqlAlchemyJobQueue
from .job_repository import JobRepository

__all__ = ["JobRepository", "SqlAlchemyJobQueue"]
