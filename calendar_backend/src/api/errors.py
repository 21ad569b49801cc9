"""
Error types raised by the service layer and the handlers that turn them into
JSON responses.
"""
from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse


class EventValidationError(Exception):
    """Raised when a required identifying parameter is missing or unusable.

    Raised before the store is touched.

    Args:
        message: Human readable description of the problem.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class EventNotFoundError(Exception):
    """Raised when a lookup, update or delete targets an unknown event id."""

    def __init__(self, event_id: int):
        self.event_id = event_id
        super().__init__(f"Event {event_id} not found")


async def event_validation_error_handler(request: Request, exc: EventValidationError) -> JSONResponse:
    """Return 400 with the same envelope used for request validation errors."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "ValidationError",
            "message": exc.message,
            "detail": [],
        },
    )


async def event_not_found_handler(request: Request, exc: EventNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Event not found"},
    )
