"""ASGI entry point: ``uvicorn src.hls_distribution.main:app``."""

from __future__ import annotations

import uvicorn

from .core.app import create_app
from .core.config import AppConfig
from .logging import configure_logging

configure_logging()
app = create_app(AppConfig.build_default())


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
