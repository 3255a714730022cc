"""Database models and session helpers for the job queue."""

from .db_init import init_db
from .db_models import Base, JobModel
from .db_session import build_engine, build_session_factory

__all__ = ["Base", "JobModel", "build_engine", "build_session_factory", "init_db"]
