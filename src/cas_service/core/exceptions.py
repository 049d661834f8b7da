"""
Custom exception handlers for consistent error responses.

Store exceptions are translated to ServiceError at the router boundary
by ``service_error_from_store``; everything else falls through to the
unhandled exception handler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from fastapi.responses import JSONResponse

from cas_service.logging import get_logger
from cas_service.store.errors import (
    CipherError,
    InvalidObjectKeyError,
    ObjectNotFoundError,
    StorageIOError,
    StoreError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine
    from typing import Any

    from fastapi import FastAPI, Request
    from starlette.requests import Request as StarletteRequest

    # nosemgrep: no-module-level-constants (type alias for static type checking only)
    ExceptionHandler = Callable[
        [StarletteRequest, Exception],
        Coroutine[Any, Any, JSONResponse],
    ]


class ServiceError(Exception):
    """
    Base exception for service errors.

    Attributes:
        error: Machine-readable error code
        message: Human-readable description
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int,
        details: dict[str, object] | None,
    ) -> None:
        self.error = error
        self.message = message
        self.status_code = status_code
        if details is None:
            self.details: dict[str, object] = {}
        else:
            self.details = details
        super().__init__(message)


def service_error_from_store(
    exc: StoreError,
    namespace: str,
    key: str | None,
) -> ServiceError:
    """Map a store exception onto the HTTP error contract."""
    details: dict[str, object] = {"namespace": namespace}
    if key is not None:
        details["key"] = key

    if isinstance(exc, ObjectNotFoundError):
        return ServiceError(
            error="not_found",
            message=f"Object '{exc.key}' not found",
            status_code=404,
            details=details,
        )
    if isinstance(exc, StorageIOError):
        return ServiceError(
            error=f"storage_{exc.operation}_failed",
            message=str(exc),
            status_code=503,
            details={**details, "path": str(exc.path), "reason": exc.reason},
        )
    if isinstance(exc, CipherError):
        return ServiceError(
            error="decryption_failed",
            message=str(exc),
            status_code=400,
            details=details,
        )
    if isinstance(exc, InvalidObjectKeyError):
        return ServiceError(
            error="invalid_key",
            message=str(exc),
            status_code=400,
            details=details,
        )
    return ServiceError(
        error="storage_error",
        message=str(exc),
        status_code=500,
        details={**details, "exception_type": exc.__class__.__name__},
    )


async def service_error_handler(
    request: Request,
    exc: ServiceError,
) -> JSONResponse:
    """Handle ServiceError exceptions."""
    logger = get_logger(__name__)
    logger.warning(
        "Service error",
        extra={
            "error_code": exc.error,
            "error_message": exc.message,
            "status_code": exc.status_code,
            "details": exc.details,
            "path": str(request.url.path),
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs full traceback but returns sanitized error to client.
    """
    logger = get_logger(__name__)
    logger.exception(
        "Unhandled exception",
        extra={
            "path": str(request.url.path),
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "details": {"exception_type": exc.__class__.__name__},
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the app."""
    app.add_exception_handler(
        ServiceError,
        cast("ExceptionHandler", service_error_handler),
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)
