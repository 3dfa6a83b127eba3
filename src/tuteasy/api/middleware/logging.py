"""Request logging middleware."""

import time
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tuteasy.api.middleware.context import get_client_ip

logger = structlog.get_logger("tuteasy.api.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs one line per HTTP request.

    Level follows the response status: errors for 5xx, warnings for 4xx,
    info otherwise.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and log the outcome."""
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._log_request(request, response, duration_ms)

        return response

    def _log_request(self, request: Request, response: Response, duration_ms: float) -> None:
        """Log the completed request."""
        request_id = "unknown"
        if hasattr(request.state, "request_id"):
            request_id = str(request.state.request_id)

        log_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query": str(request.url.query) if request.url.query else None,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
            "client_ip": get_client_ip(request),
            "user_agent": request.headers.get("User-Agent"),
        }

        status_code = response.status_code
        if status_code >= 500:
            logger.error("Request failed", **log_data)
        elif status_code >= 400:
            logger.warning("Request rejected", **log_data)
        else:
            logger.info("Request completed", **log_data)
