"""Encoder capability consumed by the distribution engine."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from .profile import EncodeOptions, EncodingProfile


@runtime_checkable
class EncoderEngine(Protocol):
    """Segments a media file according to ``profile``.

    Implementations return the playlist they produced and raise
    :class:`~src.hls_distribution.exceptions.EncodingError` on failure.
    """

    def encode(self, source: Path, profile: EncodingProfile, options: EncodeOptions) -> Path:
        """Run the encoder and return the generated playlist path."""
