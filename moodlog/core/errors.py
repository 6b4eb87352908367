"""
Custom exception hierarchy for the moodlog service.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger("moodlog.api")


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class MoodLogException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class EntryNotFoundError(MoodLogException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: int):
        super().__init__(
            message=f"Mood entry {entry_id} does not exist.",
            details={"entry_id": entry_id},
        )


class InvalidEntryError(MoodLogException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_ENTRY"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            details={"field": field} if field else {},
        )


class NoPendingEntryError(MoodLogException):
    http_status = status.HTTP_409_CONFLICT
    code = "NO_PENDING_ENTRY"

    def __init__(self):
        super().__init__(message="There is no entry awaiting a replace-or-cancel decision.")


class DuplicateDayError(MoodLogException):
    """Raised by the HTTP layer when a save lands on an already-logged day."""
    http_status = status.HTTP_409_CONFLICT
    code = "DUPLICATE_DAY_PENDING"

    def __init__(self, day: date, pending: dict[str, Any] | None = None):
        details: dict[str, Any] = {"day": str(day)}
        if pending:
            details["pending"] = pending
        super().__init__(
            message=f"An entry for {day} already exists. Confirm replace or cancel.",
            details=details,
        )


class ReplaceFailedError(MoodLogException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "REPLACE_FAILED"

    def __init__(self, day: date, entry_id: int | None = None):
        details: dict[str, Any] = {"day": str(day)}
        if entry_id is not None:
            details["entry_id"] = entry_id
        super().__init__(
            message=f"Could not remove the existing entry for {day}; nothing was saved.",
            details=details,
        )


class ReviewNotFoundError(MoodLogException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "REVIEW_NOT_FOUND"

    def __init__(self, review_id: str):
        super().__init__(
            message=f"Weekly review {review_id} does not exist.",
            details={"review_id": review_id},
        )


class ReviewNotReadyError(MoodLogException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "REVIEW_NOT_READY"

    def __init__(self, attempts: int, reason: str = "exhausted"):
        super().__init__(
            message=f"Weekly review was not ready after {attempts} attempt(s).",
            details={"attempts": attempts, "reason": reason},
        )


class CatalogError(MoodLogException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "CATALOG_ERROR"

    def __init__(self, message: str, source: str | None = None):
        super().__init__(
            message=message,
            details={"source": source} if source else {},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def moodlog_exception_handler(request: Request, exc: MoodLogException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
