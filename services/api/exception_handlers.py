"""FastAPI exception handlers for custom exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from layout_maker.exceptions import (
    ConfigurationError,
    ElementNotFoundError,
    LayoutMakerError,
    PersistenceError,
    SceneNotFoundError,
    StorageError,
    ToolStateError,
    ValidationError,
)


async def layout_maker_exception_handler(request: Request, exc: LayoutMakerError) -> JSONResponse:
    """Handle Layout Maker exceptions."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    # Map exception types to HTTP status codes
    if isinstance(exc, (ConfigurationError, ValidationError, PersistenceError)):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, (ElementNotFoundError, SceneNotFoundError)):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ToolStateError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, StorageError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Layout Maker exception: {type} - {message}",
        type=type(exc).__name__,
        message=str(exc),
        details=exc.details,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )
