"""Resolve element URIs to local files."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import unquote, urlsplit

import httpx

from .exceptions import NotFoundError
from .layout import base_file_name

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1 * 1024 * 1024  # 1 MiB


@runtime_checkable
class Workspace(Protocol):
    """Asset store used by the engine to obtain source media."""

    def get(self, uri: str) -> Path:
        """Return a local file for ``uri``.

        Raises :class:`NotFoundError` when the asset does not exist and
        ``OSError`` for other retrieval failures.
        """


class LocalWorkspace:
    """Filesystem workspace that also downloads remote assets on demand."""

    def __init__(self, root: Path, *, http_client: httpx.Client | None = None) -> None:
        self.root = Path(root)
        self._http_client = http_client

    def get(self, uri: str) -> Path:
        scheme = urlsplit(uri).scheme.lower()
        if scheme in {"http", "https"}:
            return self._download(uri)
        if scheme == "file":
            path = Path(unquote(urlsplit(uri).path))
        elif scheme and len(scheme) > 1:
            raise NotFoundError(f"Unsupported URI scheme '{scheme}' for '{uri}'")
        else:
            path = Path(uri)
            if not path.is_absolute():
                path = self.root / path
        if not path.is_file():
            raise NotFoundError(f"Asset '{uri}' not found in workspace")
        return path

    def download_dir(self, uri: str) -> Path:
        digest = hashlib.sha1(uri.encode("utf-8")).hexdigest()
        return self.root / "downloads" / digest

    def _download(self, uri: str) -> Path:
        target = self.download_dir(uri) / base_file_name(uri)
        if target.is_file():
            return target

        target.parent.mkdir(parents=True, exist_ok=True)
        partial = target.with_name(target.name + ".part")
        client = self._http_client or httpx.Client(follow_redirects=True, timeout=30.0)
        try:
            with client.stream("GET", uri) as response:
                if response.status_code == httpx.codes.NOT_FOUND:
                    raise NotFoundError(f"Asset '{uri}' not found (HTTP 404)")
                response.raise_for_status()
                with partial.open("wb") as sink:
                    for chunk in response.iter_bytes(CHUNK_SIZE):
                        sink.write(chunk)
        except httpx.HTTPError as exc:
            partial.unlink(missing_ok=True)
            raise OSError(f"Unable to download '{uri}': {exc}") from exc
        except NotFoundError:
            partial.unlink(missing_ok=True)
            raise
        finally:
            if self._http_client is None:
                client.close()

        partial.replace(target)
        logger.info("workspace.download.done", extra={"uri": uri, "path": str(target)})
        return target


__all__ = ["LocalWorkspace", "Workspace"]
