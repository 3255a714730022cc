"""Encoder engine backed by the ffmpeg command line tool."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from ..exceptions import EncodingError
from .profile import EncodeOptions, EncodingProfile

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES = 20

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class FFmpegHLSEncoder:
    """Runs ffmpeg synchronously and reports the playlist it wrote."""

    def __init__(
        self,
        binary: str = "ffmpeg",
        *,
        loglevel: str = "warning",
        runner: Runner | None = None,
    ) -> None:
        self.binary = binary
        self.loglevel = loglevel
        self._run = runner or subprocess.run

    def build_command(
        self, source: Path, profile: EncodingProfile, options: EncodeOptions
    ) -> list[str]:
        return [
            self.binary,
            "-hide_banner",
            "-nostdin",
            "-loglevel", self.loglevel,
            *profile.render(source, options),
        ]

    @staticmethod
    def output_file(arguments: Sequence[str], suffix: str = ".m3u8") -> Path | None:
        """Return the last argument naming a file with ``suffix``."""

        output: Path | None = None
        for argument in arguments:
            if argument.endswith(suffix):
                output = Path(argument)
        return output

    def encode(self, source: Path, profile: EncodingProfile, options: EncodeOptions) -> Path:
        command = self.build_command(source, profile, options)
        playlist = self.output_file(command, profile.output_suffix)
        if playlist is None:
            raise EncodingError(
                f"Profile '{profile.identifier}' does not name a {profile.output_suffix} output"
            )

        options.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            "encoder.ffmpeg.start",
            extra={"profile": profile.identifier, "command": shlex.join(command)},
        )
        try:
            result = self._run(command, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise EncodingError(f"Unable to start '{self.binary}': {exc}") from exc

        if result.returncode != 0:
            raise EncodingError(
                f"ffmpeg exited with status {result.returncode} while encoding "
                f"'{source}': {_stderr_tail(result)}"
            )
        if not playlist.is_file():
            raise EncodingError(f"ffmpeg finished but did not write '{playlist}'")

        logger.info(
            "encoder.ffmpeg.done",
            extra={"profile": profile.identifier, "playlist": str(playlist)},
        )
        return playlist


def _stderr_tail(result: Any) -> str:
    stderr = (getattr(result, "stderr", None) or "").strip()
    if not stderr:
        return "no output"
    return " | ".join(stderr.splitlines()[-STDERR_TAIL_LINES:])


__all__ = ["FFmpegHLSEncoder"]
