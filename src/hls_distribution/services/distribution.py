"""Distribution job engine: publish tracks as HLS and retract them again."""

from __future__ import annotations

import logging
import shutil
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

import httpx

from ..acceptance import accepts
from ..domain.models import HLS_MIME_TYPE, Element, Package
from ..encoder import EncodeOptions, EncoderEngine, EncodingProfile, hls_profile
from ..exceptions import (
    DistributionError,
    ValidationError,
    ensure_found,
    wrap_distribution_errors,
)
from ..layout import DistributionLayout, base_file_name
from ..playlist import relativize
from ..workspace import Workspace

logger = logging.getLogger(__name__)


class AvailabilityChecker:
    """Polls a published URI with ``HEAD`` until it answers or attempts run out."""

    def __init__(
        self,
        *,
        attempts: int = 3,
        delay_seconds: float = 1.0,
        timeout_seconds: float = 5.0,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._attempts = max(1, attempts)
        self._delay_seconds = max(0.0, delay_seconds)
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client
        self._sleep = sleep

    def check(self, uri: str) -> None:
        """Raise :class:`DistributionError` unless ``uri`` becomes reachable."""

        client = self._http_client or httpx.Client(
            follow_redirects=True, timeout=self._timeout_seconds
        )
        last_problem = "no response"
        try:
            for attempt in range(1, self._attempts + 1):
                try:
                    response = client.head(uri)
                except httpx.HTTPError as exc:
                    last_problem = repr(exc)
                else:
                    if response.status_code < 400:
                        logger.info(
                            "distribution.availability.ok",
                            extra={"uri": uri, "attempt": attempt},
                        )
                        return
                    last_problem = f"HTTP {response.status_code}"
                logger.debug(
                    "distribution.availability.retry",
                    extra={"uri": uri, "attempt": attempt, "problem": last_problem},
                )
                if attempt < self._attempts:
                    self._sleep(self._delay_seconds)
        finally:
            if self._http_client is None:
                client.close()
        raise DistributionError(f"Distributed playlist '{uri}' is not available: {last_problem}")


class HLSDistributionEngine:
    """Runs the distribute and retract operations synchronously.

    All collaborators arrive through the constructor. The engine keeps no state
    between calls, so one instance may serve several worker threads as long as
    callers do not overlap operations on the same element.
    """

    def __init__(
        self,
        *,
        layout: DistributionLayout,
        workspace: Workspace,
        encoder: EncoderEngine,
        profile: EncodingProfile | None = None,
        work_dir: Path | None = None,
        availability_checker: AvailabilityChecker | None = None,
    ) -> None:
        self.layout = layout
        self.workspace = workspace
        self.encoder = encoder
        self.profile = profile or hls_profile()
        self.work_dir = Path(work_dir) if work_dir is not None else None
        self.availability_checker = availability_checker or AvailabilityChecker()

    def distribute(
        self,
        package: Package | None,
        element_id: str | None,
        check_availability: bool = False,
    ) -> Element | None:
        """Publish ``element_id`` of ``package`` and return the distributed element.

        Returns ``None`` for elements this channel does not handle. Raises
        :class:`ValidationError` for a missing package or unknown element and
        :class:`DistributionError` for every other failure.
        """

        package, element = self._resolve(package, element_id)
        with wrap_distribution_errors("distribute", element_id):
            if not accepts(element):
                logger.info(
                    "distribution.distribute.skipped",
                    extra={"package_id": package.id, "element_id": element_id},
                )
                return None

            logger.info(
                "distribution.distribute.start",
                extra={"package_id": package.id, "element_id": element_id, "uri": element.uri},
            )
            source = self.workspace.get(element.uri)
            destination = self.layout.destination_path(package, element)
            destination_dir = destination.parent
            try:
                destination_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise DistributionError(
                    f"Unable to create distribution directory '{destination_dir}'"
                ) from exc

            segments = self._encode_into(destination, source, base_file_name(element.uri))

            public_uri = self.layout.public_uri(package, element)
            if check_availability:
                self.availability_checker.check(public_uri)

            logger.info(
                "distribution.distribute.done",
                extra={
                    "package_id": package.id,
                    "element_id": element_id,
                    "uri": public_uri,
                    "segments": len(segments),
                },
            )
            return element.distributed(public_uri, HLS_MIME_TYPE)

    def retract(self, package: Package | None, element_id: str | None) -> Element | None:
        """Remove the distributed copy of ``element_id`` and return the element."""

        package, element = self._resolve(package, element_id)
        with wrap_distribution_errors("retract", element_id):
            if not accepts(element):
                logger.info(
                    "distribution.retract.skipped",
                    extra={"package_id": package.id, "element_id": element_id},
                )
                return None

            element_dir = self.layout.element_directory(package, element)
            if not element_dir.is_dir():
                raise DistributionError("track directory does not exist")

            shutil.rmtree(element_dir)
            package_dir = self.layout.package_directory(package)
            if package_dir.is_dir() and not any(package_dir.iterdir()):
                package_dir.rmdir()

            logger.info(
                "distribution.retract.done",
                extra={"package_id": package.id, "element_id": element_id, "path": str(element_dir)},
            )
            return element

    def _encode_into(self, destination: Path, source: Path, base_name: str) -> list[Path]:
        """Segment ``source`` in a scratch directory and publish it at ``destination``."""

        if self.work_dir is not None:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="hls-", dir=self.work_dir) as staging:
            options = EncodeOptions(output_dir=Path(staging).absolute(), output_name=base_name)
            playlist = self.encoder.encode(source, self.profile, options)
            return relativize(playlist, destination)

    @staticmethod
    def _resolve(
        package: Package | None, element_id: str | None
    ) -> tuple[Package, Element]:
        if package is None:
            raise ValidationError("Package must be specified")
        if not element_id:
            raise ValidationError("Element ID must be specified")
        element = ensure_found(
            package.get_element(element_id), entity="Element", identifier=element_id
        )
        return package, element


__all__ = ["AvailabilityChecker", "HLSDistributionEngine"]
