"""Service composition helpers."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from sqlalchemy.engine import Engine

from ..core.config import AppConfig
from ..db import build_engine, build_session_factory, init_db
from ..encoder import EncoderEngine, FFmpegHLSEncoder, hls_profile
from ..infrastructure.job_queue import SqlAlchemyJobQueue
from ..infrastructure.job_repository import JobRepository
from ..layout import DistributionLayout
from ..workspace import LocalWorkspace, Workspace
from .dispatch import DistributionService
from .distribution import AvailabilityChecker, HLSDistributionEngine


@dataclass(slots=True)
class ServiceContainer:
    """Everything the HTTP layer and the workers share."""

    config: AppConfig
    engine: HLSDistributionEngine
    queue: JobRepository
    distribution_service: DistributionService
    db_engine: Engine | None = None

    def close(self) -> None:
        if self.db_engine is not None:
            self.db_engine.dispose()


def build_services(
    config: AppConfig,
    *,
    encoder: EncoderEngine | None = None,
    workspace: Workspace | None = None,
    queue: JobRepository | None = None,
    http_client: httpx.Client | None = None,
) -> ServiceContainer:
    """Wire the engine, the queue and the dispatch service from ``config``.

    Collaborators passed explicitly replace the configured defaults, which is
    how tests swap in a fake encoder or an in-memory queue.
    """

    db_engine: Engine | None = None
    if queue is None:
        db_engine = build_engine(config.database_url)
        init_db(db_engine)
        queue = SqlAlchemyJobQueue(build_session_factory(db_engine))

    engine = HLSDistributionEngine(
        layout=DistributionLayout(root=config.distribution_root, base_url=config.hls_url),
        workspace=workspace or LocalWorkspace(config.workspace_root, http_client=http_client),
        encoder=encoder
        or FFmpegHLSEncoder(config.ffmpeg_path, loglevel=config.ffmpeg_loglevel),
        profile=hls_profile(segment_duration=config.segment_duration_seconds),
        work_dir=config.work_dir,
        availability_checker=AvailabilityChecker(
            attempts=config.availability_attempts,
            delay_seconds=config.availability_delay_seconds,
            timeout_seconds=config.availability_timeout_seconds,
            http_client=http_client,
        ),
    )
    return ServiceContainer(
        config=config,
        engine=engine,
        queue=queue,
        distribution_service=DistributionService(engine=engine, queue=queue),
        db_engine=db_engine,
    )


__all__ = ["ServiceContainer", "build_services"]
