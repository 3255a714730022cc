from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from src.hls_distribution.core.config import AppConfig
from src.hls_distribution.db import build_engine, build_session_factory, init_db
from src.hls_distribution.domain.models import Package
from src.hls_distribution.infrastructure.job_queue import SqlAlchemyJobQueue
from src.hls_distribution.layout import DistributionLayout
from src.hls_distribution.services.distribution import HLSDistributionEngine
from src.hls_distribution.workspace import LocalWorkspace

from tests.helpers.factories import BASE_URL, make_package
from tests.mocks.encoder import FakeHLSEncoder


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "media.mov").write_bytes(b"source-media")
    return root


@pytest.fixture
def distribution_root(tmp_path: Path) -> Path:
    return tmp_path / "hls"


@pytest.fixture
def package() -> Package:
    return make_package()


@pytest.fixture
def fake_encoder() -> FakeHLSEncoder:
    return FakeHLSEncoder()


@pytest.fixture
def engine(
    distribution_root: Path, workspace_root: Path, fake_encoder: FakeHLSEncoder, tmp_path: Path
) -> HLSDistributionEngine:
    return HLSDistributionEngine(
        layout=DistributionLayout(root=distribution_root, base_url=BASE_URL),
        workspace=LocalWorkspace(workspace_root),
        encoder=fake_encoder,
        work_dir=tmp_path / "work",
    )


@pytest.fixture
def job_queue() -> Iterator[SqlAlchemyJobQueue]:
    db_engine = build_engine("sqlite:///:memory:")
    init_db(db_engine)
    yield SqlAlchemyJobQueue(build_session_factory(db_engine))
    db_engine.dispose()


@pytest.fixture
def app_config(distribution_root: Path, workspace_root: Path, tmp_path: Path) -> AppConfig:
    return AppConfig(
        distribution_root=distribution_root,
        workspace_root=workspace_root,
        work_dir=tmp_path / "work",
        hls_url=BASE_URL,
        database_url="sqlite:///:memory:",
        worker_count=0,
        _env_file=None,
    )
