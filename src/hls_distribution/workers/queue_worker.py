"""Queue worker executing distribution jobs."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from ..domain.models import Job
from ..exceptions import QueueUnavailableError
from ..services.dispatch import DistributionService

T = TypeVar("T")


class QueueWorker:
    """Polls the queue and runs each acquired job in a worker thread."""

    def __init__(
        self,
        *,
        distribution_service: DistributionService,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Any] | None = None,
        poll_interval: float = 1.0,
    ) -> None:
        self.distribution_service = distribution_service
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = self._wrap_sleep(sleep)
        self._poll_interval = max(poll_interval, 0.001)
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def _wrap_sleep(
        sleep: Callable[[float], Any] | None,
    ) -> Callable[[float], Awaitable[None]]:
        if sleep is None:
            return asyncio.sleep

        async def _async_sleep(seconds: float) -> None:
            result = sleep(seconds)
            if inspect.isawaitable(result):
                await result

        return _async_sleep

    @staticmethod
    async def _run_sync(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Execute ``func`` in a worker thread to avoid blocking the event loop."""

        return await asyncio.to_thread(func, *args, **kwargs)

    # ------------------------------------------------------------------
    # High-level control flow
    # ------------------------------------------------------------------
    async def run_once(self, *, shutdown_event: asyncio.Event | None = None) -> Job | None:
        """Acquire and execute at most one job; return the finished job."""

        if shutdown_event is not None and shutdown_event.is_set():
            return None

        queue = self.distribution_service.queue
        job = await self._run_sync(queue.acquire_next, now=self._clock())
        if job is None:
            return None
        return await self._run_sync(self.distribution_service.run_job, job)

    async def run_forever(
        self,
        *,
        worker_id: int,
        shutdown_event: asyncio.Event,
    ) -> None:
        """Continuously process jobs until ``shutdown_event`` is set."""

        self._logger.info("worker.started", extra={"worker_id": worker_id})
        try:
            while not shutdown_event.is_set():
                try:
                    finished = await self.run_once(shutdown_event=shutdown_event)
                except QueueUnavailableError:
                    self._logger.warning(
                        "worker.queue.unavailable", extra={"worker_id": worker_id}
                    )
                    finished = None
                except ValueError as exc:
                    # Another worker already recorded the job's terminal state
                    self._logger.error(
                        "worker.job.finish_rejected",
                        extra={"worker_id": worker_id, "error": str(exc)},
                    )
                    finished = None
                if finished is None:
                    await self._sleep(self._poll_interval)
        except asyncio.CancelledError:
            self._logger.debug("QueueWorker %s cancelled", worker_id)
            raise
        finally:
            self._logger.info("worker.stopped", extra={"worker_id": worker_id})


__all__ = ["QueueWorker"]
