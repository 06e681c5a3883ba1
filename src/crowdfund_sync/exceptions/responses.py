"""Map domain exceptions to the response shape the HTTP layer returns."""

from __future__ import annotations

from dataclasses import dataclass

from crowdfund_sync.exceptions.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)

GENERIC_SERVER_ERROR = "Internal server error"


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    """Status code and client-safe message for a failed request."""

    status_code: int
    message: str


def to_error_response(exc: BaseException) -> ErrorResponse:
    """Return the client-facing response for exc.

    Conflict, not-found and validation errors carry their own message.
    Everything else (transient after exhaustion, unexpected) gets a generic
    message; the detail stays in server logs.
    """
    if isinstance(exc, ConflictError):
        return ErrorResponse(409, str(exc) or "Already recorded")
    if isinstance(exc, NotFoundError):
        return ErrorResponse(404, str(exc) or "Not found")
    if isinstance(exc, ValidationFailedError):
        return ErrorResponse(400, str(exc) or "Bad request")
    return ErrorResponse(500, GENERIC_SERVER_ERROR)
