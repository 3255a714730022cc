from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.hls_distribution.domain.models import JobStatus, Operation, Package
from src.hls_distribution.exceptions import (
    DistributionError,
    UnknownOperationError,
    ValidationError,
)
from src.hls_distribution.infrastructure.job_queue import SqlAlchemyJobQueue
from src.hls_distribution.schemas import parse_element, parse_package, serialize_package
from src.hls_distribution.services.dispatch import JOB_TYPE, DistributionService
from src.hls_distribution.services.distribution import HLSDistributionEngine

from tests.helpers.factories import BASE_URL


@pytest.fixture
def service(engine: HLSDistributionEngine, job_queue: SqlAlchemyJobQueue) -> DistributionService:
    return DistributionService(engine=engine, queue=job_queue)


def test_distribute_enqueues_job_with_flag(service: DistributionService, package: Package) -> None:
    job = service.distribute(package, "track-h264", check_availability=False)

    assert job.job_type == JOB_TYPE == "org.opencastproject.distribution.hls"
    assert job.operation is Operation.DISTRIBUTE
    assert job.status is JobStatus.QUEUED
    assert len(job.arguments) == 3
    assert parse_package(job.arguments[0]).id == "pkg1"
    assert job.arguments[1:] == ["track-h264", "false"]


def test_distribute_defaults_to_no_availability_check(
    service: DistributionService, package: Package
) -> None:
    job = service.distribute(package, "track-h264")

    assert job.arguments[2] == "false"


def test_retract_enqueues_two_arguments(service: DistributionService, package: Package) -> None:
    job = service.retract(package, "track-h264")

    assert job.operation is Operation.RETRACT
    assert job.arguments[1:] == ["track-h264"]
    assert len(job.arguments) == 2


def test_submission_validates_inputs(service: DistributionService, package: Package) -> None:
    with pytest.raises(ValidationError):
        service.distribute(None, "track-h264")
    with pytest.raises(ValidationError):
        service.retract(package, "")


def test_process_distribute_returns_serialized_element(
    service: DistributionService, package: Package
) -> None:
    payload = service.process("Distribute", [serialize_package(package), "track-h264", "false"])

    assert payload is not None
    element = parse_element(payload)
    assert element.uri == f"{BASE_URL}/pkg1/track-h264/media.mov.m3u8"
    assert element.mime_type == "application/x-mpegURL"
    assert json.loads(payload)["id"] is None


def test_process_rejected_element_returns_none(service: DistributionService, package: Package) -> None:
    assert service.process(Operation.DISTRIBUTE, [serialize_package(package), "catalog-1", "true"]) is None
    assert service.process(Operation.RETRACT, [serialize_package(package), "catalog-1"]) is None


def test_process_unknown_operation(service: DistributionService, package: Package) -> None:
    with pytest.raises(UnknownOperationError):
        service.process("Publish", [serialize_package(package), "track-h264"])


def test_process_checks_argument_count(service: DistributionService, package: Package) -> None:
    with pytest.raises(ValidationError, match="expects 3 arguments"):
        service.process(Operation.DISTRIBUTE, [serialize_package(package), "track-h264"])


def test_run_job_success(
    service: DistributionService, job_queue: SqlAlchemyJobQueue, package: Package, distribution_root: Path
) -> None:
    service.distribute(package, "track-h264", check_availability=False)
    job = job_queue.acquire_next()
    assert job is not None

    finished = service.run_job(job)

    assert finished.status is JobStatus.SUCCEEDED
    assert finished.payload is not None
    assert parse_element(finished.payload).reference == "track-h264"
    assert (distribution_root / "pkg1" / "track-h264" / "media.mov.m3u8").is_file()
    assert job_queue.get_job(job.id).status is JobStatus.SUCCEEDED


def test_run_job_not_applicable_succeeds_without_payload(
    service: DistributionService, job_queue: SqlAlchemyJobQueue, package: Package
) -> None:
    service.retract(package, "catalog-1")
    job = job_queue.acquire_next()
    assert job is not None

    finished = service.run_job(job)

    assert finished.status is JobStatus.SUCCEEDED
    assert finished.payload is None


def test_run_job_failure_records_detail(
    service: DistributionService, job_queue: SqlAlchemyJobQueue, package: Package
) -> None:
    service.retract(package, "track-h264")
    job = job_queue.acquire_next()
    assert job is not None

    finished = service.run_job(job)

    assert finished.status is JobStatus.FAILED
    assert finished.failure_detail == "track directory does not exist"


def test_run_job_malformed_package_fails_job(
    service: DistributionService, job_queue: SqlAlchemyJobQueue
) -> None:
    job = job_queue.create_job(JOB_TYPE, Operation.RETRACT, ["{not json", "track-h264"])

    finished = service.run_job(job)

    assert finished.status is JobStatus.FAILED
    assert (finished.failure_detail or "").startswith("Malformed package document")


def test_run_job_unexpected_error_fails_job(
    service: DistributionService, job_queue: SqlAlchemyJobQueue, package: Package, monkeypatch
) -> None:
    def explode(*args, **kwargs):
        raise KeyError("boom")

    monkeypatch.setattr(service, "process", explode)
    job = service.distribute(package, "track-h264")

    finished = service.run_job(job)

    assert finished.status is JobStatus.FAILED
    assert "boom" in (finished.failure_detail or "")


def test_distribution_error_message_is_failure_detail(
    service: DistributionService, job_queue: SqlAlchemyJobQueue, package: Package, fake_encoder
) -> None:
    fake_encoder.fail_with = DistributionError("disk full")
    job = service.distribute(package, "track-h264", check_availability=False)

    finished = service.run_job(job)

    assert finished.failure_detail == "disk full"
