"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict, List, Optional

logger = logging.getLogger("trip_ledger.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppException):
    """Raised when a draft or patch is missing or carries invalid fields for its trip type."""

    def __init__(self, message: str, fields: Optional[List[str]] = None, errors: Optional[List[Dict[str, Any]]] = None):
        details: Dict[str, Any] = {"fields": sorted(set(fields or []))}
        if errors:
            details["errors"] = errors
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class MalformedIdError(AppException):
    """Raised when a unified transaction id cannot be parsed."""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Malformed transaction id: {value!r}",
            error_code="ERR_ID_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"id": str(value)}
        )


class UnknownStoreError(AppException):
    """Raised when a unified transaction id names a store that does not exist."""

    def __init__(self, prefix: str):
        super().__init__(
            message=f"Unknown transaction store: {prefix!r}",
            error_code="ERR_ID_002",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"store": prefix}
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class AdapterIOError(AppException):
    """Raised when the underlying store call fails (connection, constraint violation)."""

    def __init__(self, store: str, operation: str, local_id: Optional[int] = None, reason: str = ""):
        self.store = store
        self.operation = operation
        self.local_id = local_id
        super().__init__(
            message=f"{store} store failed during {operation}",
            error_code="ERR_STORE_IO_001",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"store": store, "operation": operation, "local_id": local_id, "reason": reason}
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    if exc.status_code >= 500:
        logger.error(
            "Application error",
            extra={"error_code": exc.error_code, "path": request.url.path, "details": exc.details}
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors on request parameters."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_errors(exc.errors())
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception(
        "Unhandled exception: %s", type(exc).__name__,
        extra={"path": request.url.path, "method": request.method}
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )


def jsonable_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Strip pydantic error entries down to JSON-safe keys."""
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in errors
    ]
