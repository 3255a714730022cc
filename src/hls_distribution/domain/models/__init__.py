"""Domain models for the HLS distribution channel.

Packages and their elements are owned by the surrounding media system; this
service only reads them and hands back new element records. Elements are frozen
so a distributed copy is always a fresh value and the source is never mutated.
Job records mirror the queue table and carry the operation lifecycle
``queued -> running -> succeeded | failed``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from ...exceptions import UnknownOperationError

HLS_MIME_TYPE = "application/x-mpegURL"


class ElementType(str, Enum):
    """Kinds of package elements known to the media system."""

    TRACK = "track"
    CATALOG = "catalog"
    ATTACHMENT = "attachment"
    PUBLICATION = "publication"


@dataclass(frozen=True, slots=True)
class VideoStream:
    """Codec descriptor of a track's video stream."""

    format: str | None
    frame_rate: float | None = None
    resolution: str | None = None


@dataclass(frozen=True, slots=True)
class AudioStream:
    """Codec descriptor of a track's audio stream."""

    format: str | None
    channels: int | None = None
    sampling_rate: int | None = None


@dataclass(frozen=True, slots=True)
class Element:
    """One media component of a package."""

    id: str | None
    type: ElementType
    uri: str
    flavor: str | None = None
    mime_type: str | None = None
    reference: str | None = None
    video: VideoStream | None = None
    audio: AudioStream | None = None
    tags: tuple[str, ...] = ()

    @property
    def layout_id(self) -> str | None:
        """Identifier used to place the element in the distribution tree.

        A distributed element points back at its source through ``reference``,
        so both resolve to the same directory.
        """

        return self.reference or self.id

    def distributed(self, uri: str, mime_type: str = HLS_MIME_TYPE) -> "Element":
        """Return the record describing this element once published at ``uri``."""

        return replace(
            self,
            id=None,
            uri=uri,
            mime_type=mime_type,
            reference=self.layout_id,
        )


@dataclass(slots=True)
class Package:
    """Aggregate of media and metadata elements distributed together."""

    id: str
    elements: list[Element] = field(default_factory=list)
    title: str | None = None

    def get_element(self, element_id: str) -> Element | None:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def add_element(self, element: Element) -> None:
        self.elements.append(element)

    def remove_element(self, element_id: str) -> Element | None:
        element = self.get_element(element_id)
        if element is not None:
            self.elements.remove(element)
        return element


class Operation(str, Enum):
    """Closed set of operations understood by the distribution job type."""

    DISTRIBUTE = "Distribute"
    RETRACT = "Retract"

    @classmethod
    def parse(cls, value: str) -> "Operation":
        """Decode a wire operation tag; unknown tags are a configuration error."""

        try:
            return cls(value)
        except ValueError:
            raise UnknownOperationError(
                f"This service can't handle operations of type '{value}'"
            ) from None


class JobStatus(str, Enum):
    """Lifecycle states of a distribution job."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED)


@dataclass(slots=True)
class Job:
    """Queue entry representing a single distribute or retract request."""

    id: UUID
    job_type: str
    operation: Operation
    arguments: list[str]
    status: JobStatus
    created_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None
    payload: str | None = None
    failure_detail: str | None = None


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
