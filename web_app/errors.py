"""Mapping of shortener errors to HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shortener.errors import (
    ShortenerError,
    ValidationError,
    NotFoundError,
    GoneError,
    ShortCodeCollisionError,
    BackendError,
)

logger = logging.getLogger("shortener.web")

STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (GoneError, status.HTTP_410_GONE),
    (ShortCodeCollisionError, status.HTTP_409_CONFLICT),
    (BackendError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: ShortenerError) -> int:
    for error_cls, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def shortener_error_handler(request: Request, exc: ShortenerError) -> JSONResponse:
    """Render a shortener error with the status code its type maps to."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are the caller's fault."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "ValidationError", "detail": str(exc.errors())},
    )
