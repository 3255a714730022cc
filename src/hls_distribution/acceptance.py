"""Decide whether an element can be published on the HLS channel."""

from __future__ import annotations

from .domain.models import Element, ElementType

SUPPORTED_VIDEO_FORMATS = frozenset({"H.264", "AVC"})
SUPPORTED_AUDIO_FORMATS = frozenset({"AAC"})


def accepts(element: Element) -> bool:
    """Return ``True`` when every stream present on the track is supported.

    Only tracks qualify, and a track needs at least one video or audio stream.
    Segments are produced by stream copy, so codecs outside the whitelist would
    end up in MPEG-TS chunks players cannot decode.
    """

    if element.type is not ElementType.TRACK:
        return False
    if element.video is None and element.audio is None:
        return False
    if element.video is not None and element.video.format not in SUPPORTED_VIDEO_FORMATS:
        return False
    if element.audio is not None and element.audio.format not in SUPPORTED_AUDIO_FORMATS:
        return False
    return True


__all__ = ["SUPPORTED_AUDIO_FORMATS", "SUPPORTED_VIDEO_FORMATS", "accepts"]
