"""Error handling middleware for mapping exceptions to HTTP responses."""

from datetime import UTC, datetime
from typing import Any, Callable
from uuid import UUID

import structlog
from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from tuteasy.api.schemas.errors import APIError, ErrorCode
from tuteasy.config.settings import get_settings
from tuteasy.utils.exceptions import TutorNotFoundError

logger = structlog.get_logger("tuteasy.api.errors")


# Exception to HTTP status/error code mapping
# Format: Exception -> (status_code, error_code)
EXCEPTION_MAP: dict[type[Exception], tuple[int, str]] = {
    TutorNotFoundError: (404, ErrorCode.TUTOR_NOT_FOUND.value),
    ValidationError: (422, ErrorCode.VALIDATION_ERROR.value),
    SQLAlchemyError: (503, ErrorCode.SERVICE_UNAVAILABLE.value),
}


def get_request_id(request: Request) -> str:
    """Extract request ID from state or return a placeholder."""
    if hasattr(request.state, "request_id"):
        rid = request.state.request_id
        return str(rid) if isinstance(rid, UUID) else rid
    return "unknown"


def format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Reduce pydantic error dicts to JSON-safe field/message pairs."""
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in errors
    ]


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    """Build a JSON response in the APIError format."""
    request_id = get_request_id(request)
    error = APIError(
        error_code=error_code,
        message=message,
        details=details,
        request_id=request_id,
        timestamp=datetime.now(UTC),
    )
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json"),
        headers={"X-Request-ID": request_id},
    )


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render invalid path or query parameters in the APIError format."""
    return error_response(
        request,
        422,
        ErrorCode.VALIDATION_ERROR.value,
        "Request validation failed",
        {"errors": format_validation_errors(list(exc.errors()))},
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that catches exceptions and returns standardized error responses.

    Maps domain exceptions to appropriate HTTP status codes and formats
    all errors using the APIError schema.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and handle any exceptions."""
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Convert exception to JSON error response."""
        status_code, error_code, message, details = self._map_exception(exc)

        if status_code >= 500:
            logger.error(
                "Unhandled request error",
                path=request.url.path,
                error_type=type(exc).__name__,
                error=str(exc),
            )

        return error_response(request, status_code, error_code, message, details)

    def _map_exception(
        self, exc: Exception
    ) -> tuple[int, str, str, dict | None]:
        """Map exception to (status_code, error_code, message, details)."""
        if isinstance(exc, TutorNotFoundError):
            return (
                404,
                ErrorCode.TUTOR_NOT_FOUND.value,
                str(exc),
                {"tutor_id": str(exc.tutor_id)},
            )

        # Validation errors (Pydantic)
        if isinstance(exc, ValidationError):
            return (
                422,
                ErrorCode.VALIDATION_ERROR.value,
                "Request validation failed",
                {"errors": format_validation_errors(exc.errors())},
            )

        # Database unreachable or query failure
        if isinstance(exc, SQLAlchemyError):
            return (
                503,
                ErrorCode.SERVICE_UNAVAILABLE.value,
                "Search is temporarily unavailable",
                {"type": type(exc).__name__} if self._is_debug() else None,
            )

        # Generic exceptions
        return (
            500,
            ErrorCode.INTERNAL_ERROR.value,
            "Internal server error",
            {"type": type(exc).__name__} if self._is_debug() else None,
        )

    def _is_debug(self) -> bool:
        """Check if debug mode is enabled."""
        return get_settings().DEBUG
