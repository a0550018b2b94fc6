"""
Application error taxonomy and FastAPI exception handlers.

Services raise these errors; the handlers registered in `register_exception_handlers`
turn them into `{"statusCode", "code", "message", "details"}` bodies.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception for application errors"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed input, rejected before any side effect."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    """Missing resource, or one owned by somebody else."""
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class AuthError(AppError):
    """Missing/invalid/expired token or bad credentials."""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class InactiveAccountError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "ACCOUNT_NOT_ACTIVE"


class DuplicateError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "DUPLICATE"


class ProviderError(AppError):
    """The generative-AI vendor call failed."""
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "PROVIDER_ERROR"


class PersistenceError(AppError):
    code = "PERSISTENCE_ERROR"


def error_body(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "code": code,
        "message": message,
        "details": details or {},
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthError) and exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.code, exc.message, exc.details),
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Rewrite FastAPI body/query validation failures into 400s with field-level detail."""
    fields = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        fields[".".join(loc) or "request"] = err.get("msg", "Invalid value")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            status.HTTP_400_BAD_REQUEST,
            ValidationError.code,
            "Request validation failed",
            {"fields": fields},
        ),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            AppError.code,
            "An unexpected error occurred",
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error translators to the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
