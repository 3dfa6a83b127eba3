"""API middleware components."""

from .context import RequestContextMiddleware
from .errors import ErrorHandlingMiddleware, request_validation_exception_handler
from .logging import RequestLoggingMiddleware
from .observability import ObservabilityMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "ObservabilityMiddleware",
    "RequestContextMiddleware",
    "RequestLoggingMiddleware",
    "request_validation_exception_handler",
]
