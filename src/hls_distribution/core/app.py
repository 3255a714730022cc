"""FastAPI application factory.

The app keeps the :class:`~src.hls_distribution.services.ServiceContainer` on
its state for dependency resolution and runs a pool of queue workers for the
lifetime of the application.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from ..api import ApiError, api_error_handler, distribution_router
from ..services import ServiceContainer, build_services
from ..workers import QueueWorker
from .config import AppConfig

logger = logging.getLogger(__name__)


async def _startup_worker_pool(app: FastAPI) -> None:
    if getattr(app.state, "disable_worker_pool", False):
        logger.info("Worker pool startup skipped: disabled via app state")
        return
    config: AppConfig = app.state.config
    if config.worker_count <= 0:
        return
    shutdown_event = asyncio.Event()
    poll_interval = max(config.worker_poll_interval_ms / 1000.0, 0.001)
    workers: list[QueueWorker] = []
    tasks: list[asyncio.Task[None]] = []
    for index in range(config.worker_count):
        worker = QueueWorker(
            distribution_service=app.state.distribution_service,
            poll_interval=poll_interval,
        )
        task = asyncio.create_task(
            worker.run_forever(worker_id=index, shutdown_event=shutdown_event),
            name=f"hls-distribution-worker-{index}",
        )
        workers.append(worker)
        tasks.append(task)
    app.state.worker_pool = workers
    app.state.worker_tasks = tasks
    app.state.worker_shutdown_event = shutdown_event


async def _shutdown_worker_pool(app: FastAPI) -> None:
    shutdown_event = getattr(app.state, "worker_shutdown_event", None)
    if shutdown_event is not None:
        shutdown_event.set()
    tasks: list[asyncio.Task[None]] = getattr(app.state, "worker_tasks", [])
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
    app.state.worker_pool = []
    app.state.worker_tasks = []
    app.state.worker_shutdown_event = None


@contextlib.asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    await _startup_worker_pool(app)
    try:
        yield
    finally:
        await _shutdown_worker_pool(app)
        services: ServiceContainer = app.state.services
        services.close()


def create_app(
    config: AppConfig | None = None,
    *,
    services: ServiceContainer | None = None,
    disable_worker_pool: bool = False,
) -> FastAPI:
    """Initialise the FastAPI application with its routers and worker pool."""

    if services is None:
        services = build_services(config or AppConfig.build_default())
    app_config = services.config

    app = FastAPI(title="HLS Distribution Service", lifespan=_lifespan)
    app.state.config = app_config
    app.state.services = services
    app.state.distribution_service = services.distribution_service
    app.state.disable_worker_pool = disable_worker_pool
    app.state.worker_pool = []
    app.state.worker_tasks = []
    app.state.worker_shutdown_event = None

    app.add_exception_handler(ApiError, api_error_handler)
    app.include_router(distribution_router)

    if app_config.serve_static:
        app_config.distribution_root.mkdir(parents=True, exist_ok=True)
        app.mount(
            app_config.static_mount_path,
            StaticFiles(directory=app_config.distribution_root),
            name="hls-static",
        )
    return app


__all__ = ["create_app"]
