"""Application-wide exception classes and handlers.

This module provides a consistent exception hierarchy for the application
and registers global exception handlers with FastAPI. Every error leaving
the API is shaped into the standard envelope:

    {"success": false, "message": "...", "error": {"code": "...", "details": {...}}}
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taekwondo_api.core.config import settings

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base exception for application errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        self.headers = headers
        super().__init__(message)


class NotFoundError(AppError):
    """Resource not found error (404)."""

    def __init__(self, message: str = "Resource not found", resource: str | None = None):
        details = {"resource": resource} if resource else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
            details=details,
        )


class ValidationError(AppError):
    """Validation error (400)."""

    def __init__(
        self,
        message: str = "Validation error",
        field: str | None = None,
        errors: list[str] | None = None,
    ):
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class ConflictError(AppError):
    """Resource conflict error (409)."""

    def __init__(self, message: str = "Resource conflict", resource: str | None = None):
        details = {"resource": resource} if resource else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT",
            details=details,
        )


class UnauthorizedError(AppError):
    """Authentication required error (401)."""

    def __init__(self, message: str = "Not authorized to access this route"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(AppError):
    """Access forbidden error (403)."""

    def __init__(
        self,
        message: str = "Not authorized to access this resource",
        role: str | None = None,
        required_roles: list[str] | None = None,
    ):
        details: dict[str, Any] = {}
        if role is not None:
            details["role"] = role
        if required_roles:
            details["required_roles"] = required_roles
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="FORBIDDEN",
            details=details,
        )


class RateLimitError(AppError):
    """Rate limit exceeded error (429)."""

    def __init__(self, message: str = "Too many requests", retry_after: int | None = None):
        details = {"retry_after": retry_after} if retry_after else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code="RATE_LIMIT_EXCEEDED",
            details=details,
        )


class StorageUnavailableError(AppError):
    """Database query failed after the local retries were exhausted (500)."""

    def __init__(self, message: str = "Database connection error. Please try again later."):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="STORAGE_ERROR",
        )


class DatabaseUnavailableError(AppError):
    """Database is not connected and could not be recovered in time (503)."""

    def __init__(self, message: str = "Database is currently unavailable. Please try again later."):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="DATABASE_UNAVAILABLE",
        )


def error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "error": {
                "code": error_code,
                "details": details if details else None,
            },
        },
        headers=headers,
    )


_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: "VALIDATION_ERROR",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMIT_EXCEEDED",
    status.HTTP_503_SERVICE_UNAVAILABLE: "DATABASE_UNAVAILABLE",
}


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle AppError and return consistent JSON response."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "app_error",
        message=exc.message,
        code=exc.error_code,
        status=exc.status_code,
        path=request.url.path,
        details=exc.details or None,
    )

    return error_response(
        exc.status_code, exc.message, exc.error_code, exc.details, headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Reshape framework HTTP errors (unknown routes, wrong methods) into the envelope."""
    return error_response(
        exc.status_code,
        str(exc.detail),
        _STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request body/query validation failures as 400 with per-field messages."""
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    logger.info("request_validation_failed", path=request.url.path, errors=errors)

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Validation error",
        "VALIDATION_ERROR",
        {"errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions with a generic error response."""
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))

    details = None if settings.is_production else {"debug": str(exc)}
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Server error",
        "INTERNAL_ERROR",
        details,
    )


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Register exception handlers with the FastAPI app.

    Call this function in main.py to register all exception handlers.

    Args:
        app: The FastAPI application instance.
        debug: If True, unhandled exceptions propagate with stack traces.
    """
    app.add_exception_handler(AppError, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    if not debug:
        app.add_exception_handler(Exception, unhandled_exception_handler)
