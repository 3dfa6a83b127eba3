"""Tracing and Prometheus metrics for TutEasy.

Usage:
    from tuteasy.observability import observe_search_operation, traced_async

    @traced_async("search.custom")
    async def run():
        with observe_search_operation("search_tutors", sort_by="rating"):
            ...
"""

from tuteasy.observability.metrics import (
    HTTP_REQUEST_COUNT,
    HTTP_REQUEST_DURATION,
    RELEVANCE_RERANK_COUNT,
    SEARCH_COUNT,
    SEARCH_DURATION,
    SEARCH_RESULT_SIZE,
    MetricsConfig,
    MetricsManager,
    create_metrics_manager,
    get_metrics,
    get_metrics_manager,
    observe_search_operation,
    record_http_request,
    record_relevance_rerank,
    record_search_results,
)
from tuteasy.observability.tracing import (
    TracingConfig,
    TracingManager,
    add_span_attributes,
    create_span,
    create_tracing_manager,
    get_tracer,
    get_tracing_manager,
    record_exception,
    traced_async,
)

__all__ = [
    # Metrics
    "HTTP_REQUEST_COUNT",
    "HTTP_REQUEST_DURATION",
    "RELEVANCE_RERANK_COUNT",
    "SEARCH_COUNT",
    "SEARCH_DURATION",
    "SEARCH_RESULT_SIZE",
    "MetricsConfig",
    "MetricsManager",
    "create_metrics_manager",
    "get_metrics",
    "get_metrics_manager",
    "observe_search_operation",
    "record_http_request",
    "record_relevance_rerank",
    "record_search_results",
    # Tracing
    "TracingConfig",
    "TracingManager",
    "add_span_attributes",
    "create_span",
    "create_tracing_manager",
    "get_tracer",
    "get_tracing_manager",
    "record_exception",
    "traced_async",
]
