"""End-to-end scenarios: queue submission, worker execution and the files on disk."""

from __future__ import annotations

import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.hls_distribution.core.app import create_app
from src.hls_distribution.core.config import AppConfig
from src.hls_distribution.domain.models import JobStatus, Package
from src.hls_distribution.exceptions import DistributionError
from src.hls_distribution.layout import DistributionLayout
from src.hls_distribution.playlist import referenced_files
from src.hls_distribution.schemas import PackageSchema, parse_element
from src.hls_distribution.services import build_services
from src.hls_distribution.services.distribution import HLSDistributionEngine

from tests.helpers.factories import BASE_URL
from tests.mocks.encoder import FakeHLSEncoder


def test_distribute_track_end_to_end(
    engine: HLSDistributionEngine, package: Package, distribution_root: Path
) -> None:
    element = engine.distribute(package, "track-h264")

    assert (distribution_root / "pkg1" / "track-h264" / "media.mov.m3u8").is_file()
    assert (distribution_root / "pkg1" / "track-h264" / "media.mov-000.ts").is_file()
    assert element is not None
    assert element.uri == f"{BASE_URL}/pkg1/track-h264/media.mov.m3u8"
    assert element.mime_type == "application/x-mpegURL"


def test_published_playlist_is_self_contained(
    engine: HLSDistributionEngine, package: Package, distribution_root: Path, tmp_path: Path
) -> None:
    engine.distribute(package, "track-h264")
    playlist = distribution_root / "pkg1" / "track-h264" / "media.mov.m3u8"

    for line in playlist.read_text(encoding="utf-8").splitlines():
        assert str(tmp_path / "work") not in line
    for name in referenced_files(playlist):
        assert (playlist.parent / name).is_file()


def test_distribute_catalog_creates_nothing(
    engine: HLSDistributionEngine, package: Package, distribution_root: Path
) -> None:
    assert engine.distribute(package, "catalog-1") is None
    assert not distribution_root.exists()


def test_retract_without_distribution_fails(engine: HLSDistributionEngine, package: Package) -> None:
    with pytest.raises(DistributionError):
        engine.retract(package, "track-h264")


def test_retract_after_distribute_leaves_nothing(
    engine: HLSDistributionEngine, package: Package, distribution_root: Path
) -> None:
    layout = DistributionLayout(root=distribution_root, base_url=BASE_URL)
    track = package.get_element("track-h264")
    assert track is not None

    engine.distribute(package, "track-h264")
    assert layout.element_directory(package, track).is_dir()
    engine.retract(package, "track-h264")

    assert not layout.element_directory(package, track).exists()
    assert not layout.package_directory(package).exists()


def _wait_for_terminal(client: TestClient, job_id: str, timeout: float = 10.0) -> dict:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"/distribution/hls/jobs/{job_id}").json()
        if body["status"] in {"succeeded", "failed"}:
            return body
        time.sleep(0.02)
    raise AssertionError(f"job {job_id} did not finish in {timeout}s")


def test_worker_pool_processes_submitted_jobs(
    app_config: AppConfig,
    fake_encoder: FakeHLSEncoder,
    package: Package,
    distribution_root: Path,
    tmp_path: Path,
) -> None:
    config = app_config.model_copy(
        update={
            "database_url": f"sqlite:///{tmp_path / 'jobs.db'}",
            "worker_count": 2,
            "worker_poll_interval_ms": 10,
        }
    )
    app = create_app(services=build_services(config, encoder=fake_encoder))
    package_body = PackageSchema.from_domain(package).model_dump(mode="json")

    with TestClient(app) as client:
        assert len(app.state.worker_tasks) == 2
        distribute_id = client.post(
            "/distribution/hls/distribute",
            json={"package": package_body, "element_id": "track-h264", "check_availability": False},
        ).json()["id"]
        distributed = _wait_for_terminal(client, distribute_id)

        retract_id = client.post(
            "/distribution/hls/retract",
            json={"package": package_body, "element_id": "track-h264"},
        ).json()["id"]
        retracted = _wait_for_terminal(client, retract_id)

        failed_id = client.post(
            "/distribution/hls/retract",
            json={"package": package_body, "element_id": "track-h264"},
        ).json()["id"]
        failed = _wait_for_terminal(client, failed_id)

    assert distributed["status"] == JobStatus.SUCCEEDED.value
    assert parse_element(distributed["payload"]).uri == f"{BASE_URL}/pkg1/track-h264/media.mov.m3u8"
    assert retracted["status"] == JobStatus.SUCCEEDED.value
    assert parse_element(retracted["payload"]).id == "track-h264"
    assert failed["status"] == JobStatus.FAILED.value
    assert failed["failure_detail"] == "track directory does not exist"
    assert not (distribution_root / "pkg1").exists()
    assert app.state.worker_tasks == []
