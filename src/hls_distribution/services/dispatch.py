"""Job dispatch shell around :class:`HLSDistributionEngine`.

Callers never run the engine directly. ``distribute`` and ``retract`` enqueue a
job whose arguments are plain strings (serialized package, element id and, for
Distribute, the availability flag). A worker later hands the acquired job to
:meth:`DistributionService.run_job`, which decodes the arguments, runs the
engine and records either the serialized result element or the failure detail.
"""

from __future__ import annotations

from typing import Sequence
from uuid import UUID

import structlog

from ..domain.models import Job, Operation, Package
from ..exceptions import HLSDistributionError, ValidationError
from ..infrastructure.job_repository import JobRepository
from ..schemas import parse_package, serialize_element, serialize_package
from .distribution import HLSDistributionEngine

logger = structlog.get_logger(__name__)

JOB_TYPE = "org.opencastproject.distribution.hls"


def _encode_flag(value: bool) -> str:
    return "true" if value else "false"


def _decode_flag(value: str) -> bool:
    # Anything but a case-insensitive "true" is false
    return value.strip().lower() == "true"


class DistributionService:
    """Turns distribute/retract requests into queued jobs and executes them."""

    job_type = JOB_TYPE

    def __init__(self, *, engine: HLSDistributionEngine, queue: JobRepository) -> None:
        self.engine = engine
        self.queue = queue

    # Submission -------------------------------------------------------------

    def distribute(
        self, package: Package | None, element_id: str | None, check_availability: bool = False
    ) -> Job:
        """Enqueue a Distribute job for ``element_id`` of ``package``."""

        package, element_id = self._validate(package, element_id)
        return self.queue.create_job(
            self.job_type,
            Operation.DISTRIBUTE,
            [serialize_package(package), element_id, _encode_flag(check_availability)],
        )

    def retract(self, package: Package | None, element_id: str | None) -> Job:
        """Enqueue a Retract job for ``element_id`` of ``package``."""

        package, element_id = self._validate(package, element_id)
        return self.queue.create_job(
            self.job_type,
            Operation.RETRACT,
            [serialize_package(package), element_id],
        )

    def get_job(self, job_id: UUID) -> Job:
        return self.queue.get_job(job_id)

    # Execution --------------------------------------------------------------

    def process(self, operation: Operation | str, arguments: Sequence[str]) -> str | None:
        """Execute one operation and return the serialized result element.

        ``None`` means the element is not handled by this channel. Raises
        :class:`UnknownOperationError` for unknown tags, :class:`ValidationError`
        for malformed arguments and :class:`DistributionError` for engine failures.
        """

        if not isinstance(operation, Operation):
            operation = Operation.parse(operation)

        if operation is Operation.DISTRIBUTE:
            package_document, element_id, flag = self._unpack(arguments, 3, operation)
            result = self.engine.distribute(
                parse_package(package_document), element_id, _decode_flag(flag)
            )
        elif operation is Operation.RETRACT:
            package_document, element_id = self._unpack(arguments, 2, operation)
            result = self.engine.retract(parse_package(package_document), element_id)
        else:  # pragma: no cover - Operation is closed
            raise AssertionError(f"unhandled operation {operation!r}")

        if result is None:
            return None
        return serialize_element(result)

    def run_job(self, job: Job) -> Job:
        """Execute ``job`` and persist its terminal state.

        Failures are recorded on the job and never propagate to the caller.
        """

        with structlog.contextvars.bound_contextvars(
            job_id=str(job.id), operation=job.operation.value
        ):
            logger.info("dispatch.job.start", arguments=len(job.arguments))
            try:
                payload = self.process(job.operation, job.arguments)
            except HLSDistributionError as exc:
                logger.warning("dispatch.job.failed", error=str(exc), error_type=type(exc).__name__)
                return self.queue.mark_failed(job, str(exc))
            except Exception as exc:
                logger.exception("dispatch.job.crashed")
                return self.queue.mark_failed(job, str(exc) or type(exc).__name__)

            logger.info("dispatch.job.succeeded", has_payload=payload is not None)
            return self.queue.mark_succeeded(job, payload)

    # Helpers ----------------------------------------------------------------

    @staticmethod
    def _validate(package: Package | None, element_id: str | None) -> tuple[Package, str]:
        if package is None:
            raise ValidationError("Package must be specified")
        if not element_id:
            raise ValidationError("Element ID must be specified")
        return package, element_id

    @staticmethod
    def _unpack(arguments: Sequence[str], expected: int, operation: Operation) -> list[str]:
        if len(arguments) != expected:
            raise ValidationError(
                f"{operation.value} expects {expected} arguments, got {len(arguments)}"
            )
        return list(arguments)


__all__ = ["JOB_TYPE", "DistributionService"]
