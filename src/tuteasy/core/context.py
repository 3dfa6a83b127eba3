"""Request context for async-safe request correlation.

This module provides request context propagation using Python's contextvars
so that log entries and traces emitted deep inside the search engine can be
tied back to the HTTP request that triggered them.

Usage:
    from tuteasy.core.context import create_context, request_context

    ctx = create_context(client_ip="203.0.113.9")

    with request_context(ctx):
        current = get_current_context()
        logger.info("searching", request_id=str(current.request_id))
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_utils.compat import uuid7

from tuteasy.core.exceptions import ContextNotSetError


class RequestContext(BaseModel):
    """Context for a single request/operation."""

    request_id: UUID = Field(default_factory=uuid7)
    correlation_id: UUID = Field(default_factory=uuid7)
    client_ip: str | None = None
    initiated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True}

    def to_log_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary of log fields."""
        return {
            "request_id": str(self.request_id),
            "correlation_id": str(self.correlation_id),
            "client_ip": self.client_ip,
        }


# =============================================================================
# Context Variable Management
# =============================================================================

_request_context: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def get_current_context() -> RequestContext:
    """Get the current request context.

    Raises:
        ContextNotSetError: If no context is set in the current execution context
    """
    ctx = _request_context.get()
    if ctx is None:
        raise ContextNotSetError(
            "No request context is set. Use request_context() context manager."
        )
    return ctx


def get_current_context_or_none() -> RequestContext | None:
    """Get the current request context, or None if not set."""
    return _request_context.get()


def set_context(ctx: RequestContext) -> Token[RequestContext | None]:
    """Set the request context and return a token for restoration.

    This is a low-level API. Prefer using the request_context() context manager.
    """
    return _request_context.set(ctx)


def reset_context(token: Token[RequestContext | None]) -> None:
    """Reset the context to its previous value using a token."""
    _request_context.reset(token)


@contextmanager
def request_context(ctx: RequestContext):
    """Context manager for setting request context.

    Works for both sync and async code because contextvars are
    propagated to async tasks.

    Args:
        ctx: The context to set for the duration of the block

    Yields:
        The context that was set
    """
    token = set_context(ctx)
    try:
        yield ctx
    finally:
        reset_context(token)


def create_context(
    *,
    request_id: UUID | None = None,
    correlation_id: UUID | None = None,
    client_ip: str | None = None,
) -> RequestContext:
    """Factory function to create a RequestContext with defaults.

    Args:
        request_id: Optional request ID (auto-generated if not provided)
        correlation_id: Optional correlation ID, usually propagated from an
            upstream caller (auto-generated if not provided)
        client_ip: Address of the calling client, if known

    Returns:
        A new RequestContext instance
    """
    return RequestContext(
        request_id=request_id or uuid7(),
        correlation_id=correlation_id or uuid7(),
        client_ip=client_ip,
    )
