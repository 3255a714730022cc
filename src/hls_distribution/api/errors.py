"""Reusable error primitives for API exception handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from fastapi import Request, status
from fastapi.responses import JSONResponse


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    code: str
    message: str
    headers: Mapping[str, str] | None = None

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance."""

        return JSONResponse(
            status_code=self.status_code,
            content={"error": {"code": self.code, "message": self.message}},
            headers=dict(self.headers or {}),
        )


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Convert :class:`ApiError` exceptions into JSON payloads."""

    return exc.to_response()


def invalid_request_error(message: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, "invalid_request", message)


def job_not_found_error(message: str) -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, "job_not_found", message)


def queue_unavailable_error(message: str) -> ApiError:
    """Return an :class:`ApiError` for a job queue that cannot be reached."""

    return ApiError(status.HTTP_503_SERVICE_UNAVAILABLE, "queue_unavailable", message)


__all__ = [
    "ApiError",
    "api_error_handler",
    "invalid_request_error",
    "job_not_found_error",
    "queue_unavailable_error",
]
