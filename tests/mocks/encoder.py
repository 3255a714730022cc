"""Test double for the ffmpeg segmenter."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from src.hls_distribution.encoder import EncodeOptions, EncodingProfile
from src.hls_distribution.exceptions import EncodingError


@dataclass
class EncodeCall:
    source: Path
    profile: EncodingProfile
    options: EncodeOptions


@dataclass
class FakeHLSEncoder:
    """Writes a VOD playlist with absolute segment paths, like ``-hls_base_url``.

    ``missing_segments`` names segment indexes that are listed in the playlist
    but never written, to exercise relocation failures.
    """

    segments: int = 2
    fail_with: Exception | None = None
    missing_segments: set[int] = field(default_factory=set)
    calls: list[EncodeCall] = field(default_factory=list)

    def encode(self, source: Path, profile: EncodingProfile, options: EncodeOptions) -> Path:
        self.calls.append(EncodeCall(source, profile, options))
        if self.fail_with is not None:
            raise self.fail_with
        if not Path(source).is_file():
            raise EncodingError(f"source '{source}' does not exist")

        output_dir = Path(options.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        lines = [
            "#EXTM3U",
            "#EXT-X-VERSION:3",
            f"#EXT-X-TARGETDURATION:{profile.segment_duration}",
            "#EXT-X-MEDIA-SEQUENCE:0",
            "#EXT-X-PLAYLIST-TYPE:VOD",
        ]
        for index in range(self.segments):
            name = f"{options.output_name}-{index:03d}.ts"
            if index not in self.missing_segments:
                (output_dir / name).write_bytes(b"\x47" * 188)
            lines.append(f"#EXTINF:{profile.segment_duration}.000000,")
            lines.append(f"{output_dir}/{name}")
        lines.append("#EXT-X-ENDLIST")

        playlist = output_dir / f"{options.output_name}.m3u8"
        playlist.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return playlist
