"""Segmenter abstractions and the ffmpeg implementation."""

from .base import EncoderEngine
from .ffmpeg import FFmpegHLSEncoder
from .profile import (
    DEFAULT_SEGMENT_DURATION,
    HLS_PROFILE_ID,
    EncodeOptions,
    EncodingProfile,
    hls_profile,
)

__all__ = [
    "DEFAULT_SEGMENT_DURATION",
    "HLS_PROFILE_ID",
    "EncodeOptions",
    "EncoderEngine",
    "EncodingProfile",
    "FFmpegHLSEncoder",
    "hls_profile",
]
