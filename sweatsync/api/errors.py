"""Maps domain errors to HTTP responses.

Domain error bodies have the shape {"error": <message>}. HTTPExceptions raised
by dependencies keep FastAPI's {"detail": ...} shape.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from sweatsync.core.errors import (
    AuthorizationError,
    ConflictError,
    DefaultPlanUnavailableError,
    NotFoundError,
    PersistenceError,
    SweatSyncError,
    ValidationFailure,
)

_STATUS_BY_ERROR: tuple[tuple[type[SweatSyncError], int], ...] = (
    (ValidationFailure, status.HTTP_400_BAD_REQUEST),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def status_for(error: SweatSyncError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def handle_domain_error(request: Request, exc: SweatSyncError) -> JSONResponse:
    code = status_for(exc)
    if isinstance(exc, PersistenceError):
        message = "A database error occurred. Please try again."
    elif isinstance(exc, DefaultPlanUnavailableError):
        message = "Failed to load workout plan"
    else:
        message = str(exc)

    if code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    else:
        logger.debug(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SweatSyncError, handle_domain_error)
