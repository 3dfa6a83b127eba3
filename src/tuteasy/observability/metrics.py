"""Prometheus metrics for search operations and HTTP traffic."""

import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, Info, generate_latest

NAMESPACE = "tuteasy"

SEARCH_DURATION = Histogram(
    "search_operation_duration_seconds",
    "Time to complete a search engine operation",
    ["operation", "sort_by", "status"],
    namespace=NAMESPACE,
)

SEARCH_COUNT = Counter(
    "search_operations",
    "Search engine operations by outcome",
    ["operation", "sort_by", "status"],
    namespace=NAMESPACE,
)

SEARCH_RESULT_SIZE = Histogram(
    "search_result_size",
    "Number of tutors matching a search",
    ["operation"],
    namespace=NAMESPACE,
    buckets=(0, 1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000),
)

RELEVANCE_RERANK_COUNT = Counter(
    "relevance_reranks",
    "Result pages re-ordered by keyword relevance",
    namespace=NAMESPACE,
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint", "status_code"],
    namespace=NAMESPACE,
)

HTTP_REQUEST_COUNT = Counter(
    "http_requests",
    "HTTP requests by route and status",
    ["method", "endpoint", "status_code"],
    namespace=NAMESPACE,
)

SERVICE_INFO = Info("service", "Service name, version and environment", namespace=NAMESPACE)


@dataclass
class MetricsConfig:
    """Metrics switch, read from ``METRICS_ENABLED``."""

    enabled: bool = True

    @classmethod
    def from_env(cls) -> "MetricsConfig":
        return cls(enabled=os.getenv("METRICS_ENABLED", "true").lower() == "true")


class MetricsManager:
    """Publishes service info once and exports a registry.

    Tests pass their own ``CollectorRegistry`` to export in isolation.
    """

    def __init__(
        self,
        config: MetricsConfig | None = None,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self.config = config or MetricsConfig()
        self.registry = registry or REGISTRY
        self._initialized = False

    def initialize(self, service_name: str, service_version: str, environment: str) -> None:
        if self._initialized or not self.config.enabled:
            return
        SERVICE_INFO.info(
            {"name": service_name, "version": service_version, "environment": environment}
        )
        self._initialized = True

    def get_metrics(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.registry)


_metrics_manager: MetricsManager | None = None


def get_metrics_manager() -> MetricsManager:
    global _metrics_manager
    if _metrics_manager is None:
        _metrics_manager = MetricsManager(MetricsConfig.from_env())
    return _metrics_manager


def create_metrics_manager(
    config: MetricsConfig | None = None,
    registry: CollectorRegistry | None = None,
) -> MetricsManager:
    """Replace the global manager, e.g. to point it at a test registry."""
    global _metrics_manager
    _metrics_manager = MetricsManager(config, registry)
    return _metrics_manager


def get_metrics() -> bytes:
    return get_metrics_manager().get_metrics()


@contextmanager
def observe_search_operation(operation: str, sort_by: str = "none") -> Iterator[None]:
    """Time an engine operation and count it as ``success`` or ``error``.

    Unsorted operations (statistics, filter options, details) use
    ``sort_by="none"``.
    """
    status = "success"
    start = time.perf_counter()
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        labels = {"operation": operation, "sort_by": sort_by, "status": status}
        SEARCH_DURATION.labels(**labels).observe(time.perf_counter() - start)
        SEARCH_COUNT.labels(**labels).inc()


def record_search_results(operation: str, total: int) -> None:
    """Observe how many tutors matched, across all pages."""
    SEARCH_RESULT_SIZE.labels(operation=operation).observe(total)


def record_relevance_rerank() -> None:
    RELEVANCE_RERANK_COUNT.inc()


def record_http_request(
    method: str, endpoint: str, status_code: int, duration_seconds: float
) -> None:
    labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}
    HTTP_REQUEST_DURATION.labels(**labels).observe(duration_seconds)
    HTTP_REQUEST_COUNT.labels(**labels).inc()
