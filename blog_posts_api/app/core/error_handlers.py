"""
Exception handlers that map the service's error taxonomy onto HTTP.

Client mistakes (validation failures, id mismatches) become 400,
missing posts become 404 and store failures become 500.  Server-side
failures are logged in full while the client only receives a generic
message with a short error id that can be correlated with the logs.
"""

import logging
import sqlite3
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .exceptions import ConflictError, NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None,
) -> tuple[str, str]:
    """Log full error details server-side and return a sanitized message.

    Returns a ``(message, error_id)`` tuple for the client response.
    """
    error_id = uuid.uuid4().hex[:8]
    logger.error(
        "%s failed [%s]: %s: %s",
        context,
        error_id,
        type(error).__name__,
        error,
        exc_info=error,
    )
    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"
    return sanitized, error_id


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    content = {"detail": exc.message}
    if exc.errors:
        content["errors"] = [{"field": field, "msg": msg} for field, msg in exc.errors.items()]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 rather than FastAPI's 422.

    Every error is kept, including several on the same field.
    """
    errors = []
    for error in exc.errors():
        # Skip the leading "body" / "path" location marker.
        field = ".".join(str(loc) for loc in error["loc"][1:]) or str(error["loc"][0])
        errors.append({"field": field, "msg": error["msg"]})
    logger.info("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"detail": "Validation failed", "errors": errors}),
    )


async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message})


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    message, _ = log_and_sanitize_error(exc, f"{request.method} {request.url.path}", "Internal server error")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": message})


def register_error_handlers(app: FastAPI) -> None:
    """Attach all service exception handlers to ``app``."""
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ConflictError, conflict_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(sqlite3.Error, store_error_handler)
