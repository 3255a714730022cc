"""Domain layer exports."""

from .models import (
    HLS_MIME_TYPE,
    AudioStream,
    Element,
    ElementType,
    Job,
    JobStatus,
    Operation,
    Package,
    VideoStream,
)

__all__ = [
    "HLS_MIME_TYPE",
    "AudioStream",
    "Element",
    "ElementType",
    "Job",
    "JobStatus",
    "Operation",
    "Package",
    "VideoStream",
]
