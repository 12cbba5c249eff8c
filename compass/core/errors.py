from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from compass.config import get_settings

logger = structlog.get_logger()


class AppError(Exception):
    """Base application error."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(AppError):
    """The request cannot be processed with the data currently on the decision."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    """A decision, alternative, criterion, option or rule does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


def internal_error(exc: Exception) -> AppError:
    """500 for an unexpected failure; the underlying error is only exposed outside production."""
    details = {} if get_settings().is_production else {"error": str(exc)}
    return AppError("Internal server error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    error_type: str,
    details: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        headers=headers,
        content={
            "error": {
                "message": message,
                "type": error_type,
                "details": details if details is not None else {},
            },
            "request_id": getattr(request.state, "request_id", None),
        },
    )

    # Error responses bypass CORSMiddleware when raised from inside the app
    settings = get_settings()
    origin = request.headers.get("origin")
    if origin and (settings.cors_origins == "*" or origin in settings.cors_origins_list):
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
    return response


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle application errors with consistent format and CORS headers."""
    return _error_response(request, exc.status_code, exc.message, type(exc).__name__, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors."""
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "ValidationError",
        jsonable_encoder(exc.errors()),
    )


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return _error_response(request, status.HTTP_400_BAD_REQUEST, str(exc), "ValueError")


async def permission_error_handler(request: Request, exc: PermissionError) -> JSONResponse:
    return _error_response(request, status.HTTP_403_FORBIDDEN, str(exc), "PermissionError")


async def rate_limit_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Rate limit exceeded. Please try again later.",
        "RateLimitError",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions; details are hidden in production."""
    settings = get_settings()
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=exc,
    )
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        type(exc).__name__,
        {"error": str(exc)} if not settings.is_production else {},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap HTTPExceptions (auth failures, unknown routes) in the standard error envelope."""
    return _error_response(
        request,
        exc.status_code,
        str(exc.detail),
        "HTTPException",
        headers=getattr(exc, "headers", None),
    )
