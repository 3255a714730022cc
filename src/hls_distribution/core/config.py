"""Application configuration for the HLS distribution service.

Values are read once at startup from ``HLS_DISTRIBUTION_*`` environment
variables (or a ``.env`` file) and passed explicitly to the components that
need them; nothing reads the environment afterwards.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlsplit

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_distribution_root() -> Path:
    return Path("./var/hls")


def _default_workspace_root() -> Path:
    return Path("./var/workspace")


class AppConfig(BaseSettings):
    """Pydantic settings container for the service layer."""

    model_config = SettingsConfigDict(
        env_prefix="HLS_DISTRIBUTION_",
        env_file=".env",
        extra="ignore",
    )

    distribution_root: Path = Field(
        default_factory=_default_distribution_root,
        description="Filesystem root of the public HLS distribution tree.",
    )
    hls_url: str = Field(
        default="http://localhost:8000/static",
        min_length=1,
        description="Public base URL under which the distribution root is served.",
    )
    ffmpeg_path: str = Field(default="ffmpeg", description="ffmpeg executable.")
    ffmpeg_loglevel: str = Field(default="warning")
    segment_duration_seconds: int = Field(
        default=10,
        ge=1,
        description="Target HLS segment duration passed to the segmenter.",
    )
    work_dir: Path | None = Field(
        default=None,
        description="Parent directory for encoder staging directories (system temp if unset).",
    )
    workspace_root: Path = Field(
        default_factory=_default_workspace_root,
        description="Directory used to resolve relative asset URIs and cache downloads.",
    )
    database_url: str = Field(
        default="sqlite:///hls_distribution.db",
        description="SQLAlchemy URL of the job queue database.",
    )
    worker_count: int = Field(
        default=1,
        ge=0,
        description="Number of queue workers started with the application.",
    )
    worker_poll_interval_ms: int = Field(
        default=1_000,
        ge=10,
        description="Polling interval for QueueWorker.run_forever in milliseconds.",
    )
    availability_attempts: int = Field(default=3, ge=1)
    availability_delay_seconds: float = Field(default=1.0, ge=0.0)
    availability_timeout_seconds: float = Field(default=5.0, gt=0.0)
    serve_static: bool = Field(
        default=False,
        description="Serve the distribution root from this application under hls_url's path.",
    )

    @property
    def static_mount_path(self) -> str:
        """Path component of ``hls_url`` used when serving the tree locally."""

        path = urlsplit(self.hls_url).path.rstrip("/")
        return path or "/static"

    @classmethod
    def build_default(cls) -> "AppConfig":
        return cls()


__all__ = ["AppConfig"]
