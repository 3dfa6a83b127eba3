"""OpenTelemetry tracing: provider setup, instrumentation and span helpers."""

from __future__ import annotations

import functools
import os
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar
from uuid import UUID

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, SpanKind, Status, StatusCode

from tuteasy import __version__

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator

    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

P = ParamSpec("P")
R = TypeVar("R")

# Health and scrape endpoints produce no spans.
_UNTRACED_URLS = "health,health/db,health/ready,metrics"


@dataclass
class TracingConfig:
    """Tracing settings.

    Spans are only exported when ``otlp_endpoint`` is set.
    """

    service_name: str = "tuteasy"
    service_version: str = __version__
    environment: str = "development"
    otlp_endpoint: str | None = None
    enabled: bool = True

    @classmethod
    def from_env(cls) -> TracingConfig:
        return cls(
            service_name=os.getenv("OTEL_SERVICE_NAME", "tuteasy"),
            environment=os.getenv("ENVIRONMENT", "development"),
            otlp_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"),
            enabled=os.getenv("OTEL_TRACING_ENABLED", "true").lower() == "true",
        )


class TracingManager:
    """Owns the tracer provider and the FastAPI/SQLAlchemy instrumentation."""

    def __init__(self, config: TracingConfig | None = None) -> None:
        self.config = config or TracingConfig()
        self._tracer_provider: TracerProvider | None = None
        self._tracer: trace.Tracer | None = None
        self._initialized = False

    @property
    def tracer(self) -> trace.Tracer:
        if self._tracer is None:
            self._tracer = trace.get_tracer(self.config.service_name, self.config.service_version)
        return self._tracer

    def initialize(self) -> None:
        """Install the global tracer provider. Idempotent."""
        if self._initialized or not self.config.enabled:
            return

        resource = Resource.create(
            {
                "service.name": self.config.service_name,
                "service.version": self.config.service_version,
                "deployment.environment": self.config.environment,
            }
        )
        self._tracer_provider = TracerProvider(resource=resource)
        if self.config.otlp_endpoint:
            self._tracer_provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.config.otlp_endpoint))
            )
        trace.set_tracer_provider(self._tracer_provider)
        self._initialized = True

    def instrument_fastapi(self, app: FastAPI) -> None:
        """Instrument an app. Must run before the app serves its first request."""
        if self.config.enabled:
            FastAPIInstrumentor.instrument_app(app, excluded_urls=_UNTRACED_URLS)

    def instrument_sqlalchemy(self, engine: AsyncEngine) -> None:
        if self.config.enabled:
            SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)

    def shutdown(self) -> None:
        """Flush pending spans and release the provider."""
        if self._tracer_provider is not None:
            self._tracer_provider.shutdown()
            self._initialized = False


_tracing_manager: TracingManager | None = None


def get_tracing_manager() -> TracingManager:
    global _tracing_manager
    if _tracing_manager is None:
        _tracing_manager = TracingManager(TracingConfig.from_env())
    return _tracing_manager


def create_tracing_manager(config: TracingConfig | None = None) -> TracingManager:
    """Replace the global manager."""
    global _tracing_manager
    _tracing_manager = TracingManager(config)
    return _tracing_manager


def get_tracer() -> trace.Tracer:
    return get_tracing_manager().tracer


def add_span_attributes(**attributes: Any) -> None:
    """Set attributes on the current span.

    None values are skipped; UUIDs and enums are stored as strings.
    """
    span = trace.get_current_span()
    for key, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, UUID):
            value = str(value)
        elif isinstance(value, Enum):
            value = value.value
        span.set_attribute(key, value)


def record_exception(exception: BaseException) -> None:
    """Attach an exception to the current span and mark the span failed."""
    span = trace.get_current_span()
    span.record_exception(exception)
    span.set_status(Status(StatusCode.ERROR, str(exception)))


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span]:
    with get_tracer().start_as_current_span(name, kind=kind, attributes=attributes) as span:
        yield span


def traced_async(
    name: str | None = None,
    kind: SpanKind = SpanKind.INTERNAL,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Run each call of a coroutine function inside its own span.

    The span is named ``name``, or the function's qualified name when
    omitted. Exceptions are recorded on the span and re-raised.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        span_name = name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with create_span(span_name, kind) as span:
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator
