"""Pydantic models for job arguments, results and HTTP payloads.

Packages and elements cross the job queue as JSON documents; the helpers at the
bottom of the module convert between those documents and domain dataclasses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..domain.models import (
    AudioStream,
    Element,
    ElementType,
    Job,
    JobStatus,
    Operation,
    Package,
    VideoStream,
)
from ..exceptions import ValidationError


class VideoStreamSchema(BaseModel):
    """Video codec descriptor."""

    model_config = ConfigDict(extra="forbid")

    format: Optional[str] = Field(default=None, description="Declared video format, e.g. H.264.")
    frame_rate: Optional[float] = Field(default=None, ge=0)
    resolution: Optional[str] = None


class AudioStreamSchema(BaseModel):
    """Audio codec descriptor."""

    model_config = ConfigDict(extra="forbid")

    format: Optional[str] = Field(default=None, description="Declared audio format, e.g. AAC.")
    channels: Optional[int] = Field(default=None, ge=1)
    sampling_rate: Optional[int] = Field(default=None, ge=1)


class ElementSchema(BaseModel):
    """Serialized package element."""

    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = Field(default=None, description="Identifier unique within the package.")
    type: ElementType
    uri: str = Field(..., min_length=1)
    flavor: Optional[str] = None
    mime_type: Optional[str] = None
    reference: Optional[str] = Field(
        default=None, description="Identifier of the element this one was derived from."
    )
    video: Optional[VideoStreamSchema] = None
    audio: Optional[AudioStreamSchema] = None
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, element: Element) -> "ElementSchema":
        return cls(
            id=element.id,
            type=element.type,
            uri=element.uri,
            flavor=element.flavor,
            mime_type=element.mime_type,
            reference=element.reference,
            video=(
                VideoStreamSchema(
                    format=element.video.format,
                    frame_rate=element.video.frame_rate,
                    resolution=element.video.resolution,
                )
                if element.video is not None
                else None
            ),
            audio=(
                AudioStreamSchema(
                    format=element.audio.format,
                    channels=element.audio.channels,
                    sampling_rate=element.audio.sampling_rate,
                )
                if element.audio is not None
                else None
            ),
            tags=list(element.tags),
        )

    def to_domain(self) -> Element:
        return Element(
            id=self.id,
            type=self.type,
            uri=self.uri,
            flavor=self.flavor,
            mime_type=self.mime_type,
            reference=self.reference,
            video=VideoStream(**self.video.model_dump()) if self.video else None,
            audio=AudioStream(**self.audio.model_dump()) if self.audio else None,
            tags=tuple(self.tags),
        )


class PackageSchema(BaseModel):
    """Serialized package with its ordered elements."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    title: Optional[str] = None
    elements: list[ElementSchema] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, package: Package) -> "PackageSchema":
        return cls(
            id=package.id,
            title=package.title,
            elements=[ElementSchema.from_domain(element) for element in package.elements],
        )

    def to_domain(self) -> Package:
        return Package(
            id=self.id,
            title=self.title,
            elements=[element.to_domain() for element in self.elements],
        )


class JobSchema(BaseModel):
    """Public representation of a distribution job."""

    model_config = ConfigDict(extra="forbid")

    id: UUID
    job_type: str
    operation: Operation
    status: JobStatus
    arguments: list[str]
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    payload: Optional[str] = Field(
        default=None, description="Serialized element produced by the job, if any."
    )
    failure_detail: Optional[str] = None

    @classmethod
    def from_domain(cls, job: Job) -> "JobSchema":
        return cls(
            id=job.id,
            job_type=job.job_type,
            operation=job.operation,
            status=job.status,
            arguments=list(job.arguments),
            created_at=job.created_at,
            started_at=job.started_at,
            finished_at=job.finished_at,
            payload=job.payload,
            failure_detail=job.failure_detail,
        )


class DistributeRequest(BaseModel):
    """Body of ``POST /distribute``."""

    model_config = ConfigDict(extra="forbid")

    package: PackageSchema
    element_id: str = Field(..., min_length=1)
    check_availability: bool = False


class RetractRequest(BaseModel):
    """Body of ``POST /retract``."""

    model_config = ConfigDict(extra="forbid")

    package: PackageSchema
    element_id: str = Field(..., min_length=1)


def serialize_package(package: Package) -> str:
    return PackageSchema.from_domain(package).model_dump_json()


def parse_package(document: str) -> Package:
    """Decode a package document, raising :class:`ValidationError` when malformed."""

    try:
        return PackageSchema.model_validate_json(document).to_domain()
    except PydanticValidationError as exc:
        raise ValidationError(f"Malformed package document: {exc}") from exc


def serialize_element(element: Element) -> str:
    return ElementSchema.from_domain(element).model_dump_json()


def parse_element(document: str) -> Element:
    try:
        return ElementSchema.model_validate_json(document).to_domain()
    except PydanticValidationError as exc:
        raise ValidationError(f"Malformed element document: {exc}") from exc


__all__ = [
    "AudioStreamSchema",
    "DistributeRequest",
    "ElementSchema",
    "JobSchema",
    "PackageSchema",
    "RetractRequest",
    "VideoStreamSchema",
    "parse_element",
    "parse_package",
    "serialize_element",
    "serialize_package",
]
