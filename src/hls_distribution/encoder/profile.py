"""Encoding profiles handed to the segmenter."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

HLS_PROFILE_ID = "hls.segment"
DEFAULT_SEGMENT_DURATION = 10


@dataclass(frozen=True, slots=True)
class EncodeOptions:
    """Where the encoder should place its output and how to name it."""

    output_dir: Path
    output_name: str


@dataclass(frozen=True, slots=True)
class EncodingProfile:
    """Command template for one encoding operation.

    ``command`` holds encoder arguments with ``{source}``, ``{output_dir}``,
    ``{output_name}`` and ``{segment_duration}`` placeholders.
    """

    identifier: str
    name: str
    output_suffix: str
    command: tuple[str, ...]
    segment_duration: int = DEFAULT_SEGMENT_DURATION

    def render(self, source: Path, options: EncodeOptions) -> list[str]:
        values = {
            "source": str(source),
            "output_dir": str(options.output_dir),
            "output_name": options.output_name,
            "segment_duration": str(self.segment_duration),
        }
        return [argument.format(**values) for argument in self.command]


def hls_profile(segment_duration: int = DEFAULT_SEGMENT_DURATION) -> EncodingProfile:
    """Profile that copies streams into a VOD HLS segment list.

    ``-hls_base_url`` makes every playlist entry an absolute sibling path, which
    the relativizer later rewrites to bare names in the published copy.
    """

    if segment_duration < 1:
        raise ValueError("segment_duration must be a positive number of seconds")
    return EncodingProfile(
        identifier=HLS_PROFILE_ID,
        name="HLS segmentation (stream copy)",
        output_suffix=".m3u8",
        segment_duration=segment_duration,
        command=(
            "-i", "{source}",
            "-c", "copy",
            "-f", "hls",
            "-hls_time", "{segment_duration}",
            "-hls_list_size", "0",
            "-hls_playlist_type", "vod",
            "-hls_segment_type", "mpegts",
            "-start_number", "0",
            "-hls_segment_filename", "{output_dir}/{output_name}-%03d.ts",
            "-hls_base_url", "{output_dir}/",
            "-y", "{output_dir}/{output_name}.m3u8",
        ),
    )


__all__ = [
    "DEFAULT_SEGMENT_DURATION",
    "HLS_PROFILE_ID",
    "EncodeOptions",
    "EncodingProfile",
    "hls_profile",
]
