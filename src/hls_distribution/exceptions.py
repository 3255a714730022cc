"""Domain level exceptions and helpers for the distribution layers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, TypeVar

__all__ = [
    "HLSDistributionError",
    "ValidationError",
    "UnknownOperationError",
    "NotFoundError",
    "JobNotFoundError",
    "EncodingError",
    "DistributionError",
    "QueueUnavailableError",
    "ensure_found",
    "wrap_distribution_errors",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HLSDistributionError(Exception):
    """Base class for application specific errors."""


class ValidationError(HLSDistributionError):
    """Raised when a caller passes a missing or malformed package/element."""


class UnknownOperationError(ValidationError):
    """Raised when a job carries an operation tag this service cannot handle."""


class NotFoundError(HLSDistributionError):
    """Raised when an asset or record could not be located."""


class JobNotFoundError(NotFoundError):
    """Raised when a job identifier is unknown to the queue."""


class EncodingError(HLSDistributionError):
    """Raised when the encoder fails or a segment cannot be relocated."""


class DistributionError(HLSDistributionError):
    """Umbrella error raised at the distribute/retract boundary."""


class QueueUnavailableError(HLSDistributionError):
    """Raised when the job queue backend cannot be reached."""


@dataclass(slots=True)
class _ElementContext:
    """Internal helper describing the failing operation for error messages."""

    action: str
    element_id: str | None = None

    def format(self, message: str) -> str:
        if self.element_id:
            return f"Unable to {self.action} element '{self.element_id}': {message}"
        return f"Unable to {self.action}: {message}"


def ensure_found(record: T | None, *, entity: str, identifier: str) -> T:
    """Ensure a record exists, otherwise raise :class:`ValidationError`."""

    if record is None:
        raise ValidationError(f"{entity} '{identifier}' not found")
    return record


@contextmanager
def wrap_distribution_errors(action: str, element_id: str | None = None) -> Iterator[None]:
    """Translate lower level failures into :class:`DistributionError`.

    Validation failures are caller bugs and pass through untouched, as do errors
    that already are a :class:`DistributionError`.
    """

    context = _ElementContext(action, element_id)
    try:
        yield
    except (DistributionError, ValidationError):
        raise
    except (NotFoundError, EncodingError, OSError) as exc:
        logger.warning(
            "distribution.%s.failed",
            action,
            extra={"element_id": element_id, "error": repr(exc)},
        )
        raise DistributionError(context.format(str(exc))) from exc
    except Exception as exc:
        logger.exception(
            "distribution.%s.unexpected", action, extra={"element_id": element_id}
        )
        raise DistributionError(context.format(str(exc))) from exc
