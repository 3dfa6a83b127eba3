"""Observability middleware for metrics and tracing."""

import re
import time
from collections.abc import Callable

from fastapi import Request, Response
from opentelemetry.trace import SpanKind
from starlette.middleware.base import BaseHTTPMiddleware

from tuteasy.observability.metrics import record_http_request
from tuteasy.observability.tracing import add_span_attributes, create_span, record_exception

_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Middleware that collects metrics and traces for HTTP requests.

    Health and metrics endpoints are excluded to avoid noise.
    """

    # Paths to exclude from metrics/tracing
    EXCLUDED_PATHS = {"/health", "/health/db", "/health/ready", "/metrics"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with observability instrumentation."""
        path = request.url.path
        if path in self.EXCLUDED_PATHS:
            return await call_next(request)

        normalized_path = self._normalize_path(path)
        method = request.method
        start_time = time.perf_counter()

        with create_span(f"HTTP {method} {normalized_path}", kind=SpanKind.SERVER):
            add_span_attributes(
                http_method=method,
                http_target=path,
                http_route=normalized_path,
            )

            try:
                response = await call_next(request)
            except Exception as e:
                record_exception(e)
                record_http_request(
                    method=method,
                    endpoint=normalized_path,
                    status_code=500,
                    duration_seconds=time.perf_counter() - start_time,
                )
                raise

            add_span_attributes(http_status_code=response.status_code)
            record_http_request(
                method=method,
                endpoint=normalized_path,
                status_code=response.status_code,
                duration_seconds=time.perf_counter() - start_time,
            )
            return response

    def _normalize_path(self, path: str) -> str:
        """Replace tutor IDs with a placeholder to keep metric cardinality low."""
        return _UUID_PATTERN.sub("{id}", path)
