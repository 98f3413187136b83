"""HTTP error responses for reelstore.

Every error body is ``{"error": <text>}``; replace failures additionally
carry a ``details`` string. Domain errors raised below the API are mapped
here so routes only translate storage failures into route-specific text.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from reelstore.errors import (
    NotFoundError,
    RangeNotSatisfiableError,
    ReelstoreError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """Base exception for API errors."""

    def __init__(
        self,
        status_code: int,
        error: str,
        details: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.error = error
        self.details = details
        super().__init__(status_code=status_code, detail=error, headers=headers)

    def to_body(self) -> dict[str, str]:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class BadRequestError(ApiError):
    """Invalid request (400)."""

    def __init__(self, error: str):
        super().__init__(status_code=400, error=error)


class VideoNotFoundError(ApiError):
    """Unknown blob id (404)."""

    def __init__(self, error: str = "Video not found"):
        super().__init__(status_code=404, error=error)


class RangeNotSatisfiableApiError(ApiError):
    """Range starts beyond the blob (416)."""

    def __init__(self, total_length: int, error: str = "Requested range not satisfiable"):
        super().__init__(
            status_code=416,
            error=error,
            headers={"Content-Range": f"bytes */{total_length}"},
        )


class InternalServerError(ApiError):
    """Internal server error (500)."""

    def __init__(self, error: str = "Internal Server Error", details: str | None = None):
        super().__init__(status_code=500, error=error, details=details)


def from_domain_error(exc: ReelstoreError) -> ApiError:
    """Translate a domain error into its HTTP form."""
    if isinstance(exc, RangeNotSatisfiableError):
        return RangeNotSatisfiableApiError(exc.total_length)
    if isinstance(exc, ValidationError):
        return BadRequestError(str(exc))
    if isinstance(exc, NotFoundError):
        return VideoNotFoundError()
    if isinstance(exc, StorageError):
        return InternalServerError("Storage unavailable")
    return InternalServerError()


async def api_exception_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Exception handler for API errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers=exc.headers,
    )


async def domain_exception_handler(request: Request, exc: ReelstoreError) -> JSONResponse:
    """Exception handler for domain errors that reached the API unconverted."""
    if isinstance(exc, StorageError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return await api_exception_handler(request, from_domain_error(exc))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for unexpected errors."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})
