"""Request context middleware for propagating context through the request lifecycle."""

from typing import Callable
from uuid import UUID

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from uuid_utils.compat import uuid7

from tuteasy.core.context import create_context, request_context


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from request, considering proxy headers."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take first IP in the chain (original client)
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that sets up RequestContext for each request.

    Uses the ContextVar-based context management so log entries emitted
    anywhere in the request carry its request and correlation IDs.

    Sets:
        request.state.request_id: The generated request ID (UUIDv7)
        X-Request-ID response header: For client correlation
        X-Correlation-ID response header: Propagated from the caller when valid
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request within a RequestContext."""
        request_id = uuid7()
        request.state.request_id = request_id

        ctx = create_context(
            request_id=request_id,
            correlation_id=self._parse_correlation_id(request.headers.get("X-Correlation-ID")),
            client_ip=get_client_ip(request),
        )

        with request_context(ctx):
            response = await call_next(request)

        response.headers["X-Request-ID"] = str(request_id)
        response.headers["X-Correlation-ID"] = str(ctx.correlation_id)

        return response

    def _parse_correlation_id(self, value: str | None) -> UUID | None:
        """Parse an upstream correlation ID, ignoring malformed values."""
        if not value:
            return None
        try:
            return UUID(value)
        except ValueError:
            return None
