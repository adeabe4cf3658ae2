"""Error taxonomy and exception handlers for consistent error responses.

Every failure leaves the API as JSON with an ``error`` message and a
machine-readable ``code``:

    ValidationError   → 400   missing / malformed input
    NotFoundError     → 404   unknown id
    ConflictError     → 409   duplicate unique key, stale version, illegal transition
    UnavailableError  → 503   no backing store configured or reachable
    anything else     → 500   generic message, full detail in the logs only
"""

import logging
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class IncorpDeskException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


class ValidationError(IncorpDeskException):
    """Missing or malformed input."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
        )


class NotFoundError(IncorpDeskException):
    """Exception for resources not found."""

    def __init__(self, resource: str, identifier: str | None = None):
        message = f"{resource} not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )
        self.identifier = identifier


class ConflictError(IncorpDeskException):
    """Duplicate unique key or a write that conflicts with current state."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code=error_code,
        )


class UnavailableError(IncorpDeskException):
    """Backing store not configured or unreachable."""

    def __init__(self, message: str = "Service unavailable"):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="SERVICE_UNAVAILABLE",
        )


class PermissionDeniedError(IncorpDeskException):
    """Exception for permission denied."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Create standardized error response.

    Format:
    {
        "error": "Human-readable error message",
        "code": "ERROR_CODE",
        "details": {...}  // Optional additional details
    }
    """
    content: dict = {"error": message, "code": error_code}
    if details:
        content["details"] = details

    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def incorpdesk_exception_handler(
    request: Request,
    exc: IncorpDeskException,
) -> JSONResponse:
    """Handle application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s on %s %s: %s",
        exc.error_code,
        request.method,
        request.url.path,
        exc.message,
        extra={"error_code": exc.error_code, "path": request.url.path, "method": request.method},
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Handle FastAPI HTTP exceptions."""
    if exc.status_code >= 500:
        logger.error(
            f"HTTP {exc.status_code}: {exc.detail}",
            extra={
                "path": request.url.path,
                "method": request.method,
            },
        )

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, PydanticValidationError],
) -> JSONResponse:
    """Handle request body / query validation errors as 400."""
    logger.warning(
        f"Validation error on {request.url.path}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Validation error",
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


async def database_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> JSONResponse:
    """Handle database integrity errors (unique violations, not-null, etc.)."""
    logger.error(
        f"Database integrity error on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    error_msg = str(exc.orig) if hasattr(exc, "orig") else str(exc)

    if "unique" in error_msg.lower() or "duplicate" in error_msg.lower():
        return create_error_response(
            status_code=status.HTTP_409_CONFLICT,
            message="A record with this value already exists",
            error_code="DUPLICATE_RECORD",
        )
    if "not null" in error_msg.lower():
        return create_error_response(
            status_code=status.HTTP_400_BAD_REQUEST,
            message="Required field is missing",
            error_code="NULL_VALUE_NOT_ALLOWED",
        )
    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Database constraint violation",
        error_code="INTEGRITY_ERROR",
    )


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    """Handle database operational errors (connection issues, etc.)."""
    logger.error(
        f"Database operational error on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Database not available",
        error_code="DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    logger.exception(
        f"Unhandled exception on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    # Generic message only; details stay in the logs
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(IncorpDeskException, incorpdesk_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
