from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from src.hls_distribution.domain.models import JobStatus, Package
from src.hls_distribution.exceptions import QueueUnavailableError
from src.hls_distribution.infrastructure.job_queue import SqlAlchemyJobQueue
from src.hls_distribution.services.dispatch import DistributionService
from src.hls_distribution.services.distribution import HLSDistributionEngine
from src.hls_distribution.workers.queue_worker import QueueWorker


@pytest.fixture
def service(engine: HLSDistributionEngine, job_queue: SqlAlchemyJobQueue) -> DistributionService:
    return DistributionService(engine=engine, queue=job_queue)


@pytest.mark.asyncio
async def test_run_once_executes_queued_job(
    service: DistributionService, package: Package, distribution_root: Path
) -> None:
    submitted = service.distribute(package, "track-h264", check_availability=False)
    worker = QueueWorker(distribution_service=service)

    finished = await worker.run_once()

    assert finished is not None
    assert finished.id == submitted.id
    assert finished.status is JobStatus.SUCCEEDED
    assert (distribution_root / "pkg1" / "track-h264" / "media.mov.m3u8").is_file()
    assert await worker.run_once() is None


@pytest.mark.asyncio
async def test_run_once_respects_shutdown(service: DistributionService, package: Package) -> None:
    service.distribute(package, "track-h264", check_availability=False)
    worker = QueueWorker(distribution_service=service)
    shutdown = asyncio.Event()
    shutdown.set()

    assert await worker.run_once(shutdown_event=shutdown) is None
    assert service.queue.list_jobs(status=JobStatus.QUEUED)


@pytest.mark.asyncio
async def test_run_forever_drains_queue_until_shutdown(
    service: DistributionService, package: Package
) -> None:
    service.distribute(package, "track-h264", check_availability=False)
    service.retract(package, "catalog-1")
    shutdown = asyncio.Event()
    idle_polls: list[float] = []

    def sleep(seconds: float) -> None:
        idle_polls.append(seconds)
        shutdown.set()

    worker = QueueWorker(distribution_service=service, sleep=sleep, poll_interval=0.25)

    await asyncio.wait_for(worker.run_forever(worker_id=0, shutdown_event=shutdown), timeout=5)

    statuses = [job.status for job in service.queue.list_jobs()]
    assert statuses == [JobStatus.SUCCEEDED, JobStatus.SUCCEEDED]
    assert idle_polls == [0.25]


@pytest.mark.asyncio
async def test_run_forever_survives_unavailable_queue(service: DistributionService) -> None:
    shutdown = asyncio.Event()
    calls: list[int] = []

    def acquire_next(**kwargs):
        calls.append(1)
        raise QueueUnavailableError("database is locked")

    service.queue.acquire_next = acquire_next  # type: ignore[method-assign]

    async def sleep(seconds: float) -> None:
        if len(calls) >= 2:
            shutdown.set()

    worker = QueueWorker(distribution_service=service, sleep=sleep)

    await asyncio.wait_for(worker.run_forever(worker_id=1, shutdown_event=shutdown), timeout=5)

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_run_forever_survives_rejected_finish(
    service: DistributionService, package: Package, monkeypatch: pytest.MonkeyPatch
) -> None:
    service.distribute(package, "track-h264", check_availability=False)
    service.retract(package, "catalog-1")
    shutdown = asyncio.Event()
    attempts: list[int] = []

    def mark_succeeded(job, payload, *, now=None):
        attempts.append(1)
        raise ValueError(f"Job {job.id} is already finished")

    monkeypatch.setattr(service.queue, "mark_succeeded", mark_succeeded)

    async def sleep(seconds: float) -> None:
        if len(attempts) >= 2:
            shutdown.set()

    worker = QueueWorker(distribution_service=service, sleep=sleep)

    await asyncio.wait_for(worker.run_forever(worker_id=2, shutdown_event=shutdown), timeout=5)

    assert len(attempts) == 2
