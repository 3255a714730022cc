"""Rewrite encoder playlists so they can be served from any location.

The segmenter writes its playlist into a staging directory and references each
chunk by absolute path (``/staging/media.mov-000.ts``). Publishing that file as
is would leak the staging path and break as soon as the chunks move. The
relativizer moves every chunk referenced under the staging directory next to
the destination playlist and writes a bare file name in its place. Chunks in a
staging subdirectory are flattened (``nested/x.ts`` becomes ``nested-x.ts``).
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from .exceptions import EncodingError
from .layout import PLAYLIST_SUFFIX

logger = logging.getLogger(__name__)


def playlist_base_name(playlist: Path) -> str:
    """File name of ``playlist`` with a trailing ``.m3u8`` removed."""

    name = playlist.name
    if name.endswith(PLAYLIST_SUFFIX):
        return name[: -len(PLAYLIST_SUFFIX)]
    return name


def renamed_segment(segment_name: str, old_base: str, new_base: str) -> str:
    """Swap the playlist base name prefix of a segment file name."""

    if old_base and segment_name.startswith(old_base):
        return new_base + segment_name[len(old_base):]
    return segment_name


def staged_reference(line: str, source_dir: str) -> str | None:
    """Return the path of ``line`` relative to ``source_dir`` if it lives there.

    Directive lines and paths that only share the directory string as a prefix
    (``/stage2/x.ts`` against ``/stage``) are not segment references. Entries in
    a subdirectory come back with their separators (``nested/x.ts``).
    """

    if not line or line.startswith("#"):
        return None
    prefix = source_dir.rstrip(os.sep) + os.sep
    if not line.startswith(prefix):
        return None
    return line[len(prefix):] or None


def flattened_name(relative: str) -> str:
    """Collapse a staged relative path into a single file name.

    Raises :class:`EncodingError` for paths that climb out of the staging
    directory or carry no file name.
    """

    parts = [part for part in relative.replace(os.altsep or os.sep, os.sep).split(os.sep) if part]
    if not parts or any(part in (".", "..") for part in parts):
        raise EncodingError(f"Segment reference '{relative}' cannot be flattened")
    return "-".join(parts)


def referenced_files(playlist: Path) -> list[str]:
    """List the non-directive entries of ``playlist`` in order."""

    with playlist.open("r", encoding="utf-8") as handle:
        return [
            stripped
            for stripped in (line.strip() for line in handle)
            if stripped and not stripped.startswith("#")
        ]


def relativize(source_playlist: Path, destination_playlist: Path) -> list[Path]:
    """Write a self-contained copy of ``source_playlist`` at ``destination_playlist``.

    Both paths may name the same file, in which case the playlist is rewritten
    in place. Returns the relocated segment files. Raises :class:`EncodingError`
    when a referenced segment is missing, cannot be moved or cannot be given a
    bare name, and ``OSError`` when the playlists themselves cannot be read or
    written.
    """

    source_playlist = Path(source_playlist)
    destination_playlist = Path(destination_playlist)
    source_dir = str(source_playlist.parent.absolute())
    destination_dir = destination_playlist.parent
    old_base = playlist_base_name(source_playlist)
    new_base = playlist_base_name(destination_playlist)

    relocated: list[Path] = []
    targets: dict[str, str] = {}
    output_lines: list[str] = []
    with source_playlist.open("r", encoding="utf-8") as handle:
        for raw in handle:
            line = raw.rstrip("\r\n")
            relative = staged_reference(line.strip(), source_dir)
            if relative is None:
                output_lines.append(line)
                continue
            target_name = targets.get(relative)
            if target_name is None:
                target_name = renamed_segment(flattened_name(relative), old_base, new_base)
                if target_name in targets.values():
                    raise EncodingError(
                        f"Segment '{relative}' collides with another segment named '{target_name}'"
                    )
                target = destination_dir / target_name
                _move_segment(Path(source_dir) / relative, target)
                targets[relative] = target_name
                relocated.append(target)
            output_lines.append(target_name)

    destination_dir.mkdir(parents=True, exist_ok=True)
    pending = destination_playlist.with_name(destination_playlist.name + ".tmp")
    pending.write_text("\n".join(output_lines) + "\n", encoding="utf-8")
    os.replace(pending, destination_playlist)
    if source_playlist.resolve() != destination_playlist.resolve():
        source_playlist.unlink()

    logger.info(
        "playlist.relativized",
        extra={
            "source": str(source_playlist),
            "destination": str(destination_playlist),
            "segments": len(relocated),
        },
    )
    return relocated


def _move_segment(source: Path, target: Path) -> None:
    if not source.is_file():
        raise EncodingError(f"Segment '{source}' referenced by the playlist does not exist")
    if source.resolve() == target.resolve():
        return
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(target))
    except OSError as exc:
        raise EncodingError(f"Unable to move segment '{source}' to '{target}'") from exc


__all__ = [
    "flattened_name",
    "playlist_base_name",
    "referenced_files",
    "relativize",
    "renamed_segment",
    "staged_reference",
]
