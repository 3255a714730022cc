"""HLS distribution job routes."""

from __future__ import annotations

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status

from ...domain.models import JobStatus, Package
from ...exceptions import JobNotFoundError, QueueUnavailableError, ValidationError
from ...schemas import DistributeRequest, JobSchema, RetractRequest
from ...services.dispatch import DistributionService
from ..errors import (
    ApiError,
    invalid_request_error,
    job_not_found_error,
    queue_unavailable_error,
)

router = APIRouter(prefix="/distribution/hls", tags=["distribution"])


def get_distribution_service(request: Request) -> DistributionService:
    """Fetch the dispatch service from application state."""
    try:
        return request.app.state.distribution_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("DistributionService is not configured") from exc


ServiceDep = Annotated[DistributionService, Depends(get_distribution_service)]


@router.post("/distribute", response_model=JobSchema, status_code=status.HTTP_200_OK)
def submit_distribute(payload: DistributeRequest, service: ServiceDep) -> JobSchema:
    """Queue a Distribute job for one element of the package."""

    package = payload.package.to_domain()
    _require_element(package, payload.element_id)
    try:
        job = service.distribute(package, payload.element_id, payload.check_availability)
    except ValidationError as exc:
        raise invalid_request_error(str(exc)) from exc
    except QueueUnavailableError as exc:
        raise queue_unavailable_error(str(exc)) from exc
    return JobSchema.from_domain(job)


@router.post("/retract", response_model=JobSchema, status_code=status.HTTP_200_OK)
def submit_retract(payload: RetractRequest, service: ServiceDep) -> JobSchema:
    """Queue a Retract job for one element of the package."""

    package = payload.package.to_domain()
    _require_element(package, payload.element_id)
    try:
        job = service.retract(package, payload.element_id)
    except ValidationError as exc:
        raise invalid_request_error(str(exc)) from exc
    except QueueUnavailableError as exc:
        raise queue_unavailable_error(str(exc)) from exc
    return JobSchema.from_domain(job)


@router.get("/jobs", response_model=list[JobSchema])
def list_jobs(
    service: ServiceDep,
    status_filter: Annotated[
        Optional[JobStatus], Query(alias="status", description="Only jobs in this state.")
    ] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[JobSchema]:
    try:
        jobs = service.queue.list_jobs(status=status_filter, limit=limit)
    except QueueUnavailableError as exc:
        raise queue_unavailable_error(str(exc)) from exc
    return [JobSchema.from_domain(job) for job in jobs]


@router.get("/jobs/{job_id}", response_model=JobSchema)
def get_job(job_id: Annotated[UUID, Path()], service: ServiceDep) -> JobSchema:
    """Return the current state of a job."""

    try:
        job = service.get_job(job_id)
    except JobNotFoundError as exc:
        raise job_not_found_error(str(exc)) from exc
    except QueueUnavailableError as exc:
        raise queue_unavailable_error(str(exc)) from exc
    return JobSchema.from_domain(job)


def _require_element(package: Package, element_id: str) -> None:
    # Reject unknown elements up front instead of queueing a job bound to fail
    if package.get_element(element_id) is None:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "element_not_found",
            f"Element '{element_id}' not found in package '{package.id}'",
        )


__all__ = ["router"]
