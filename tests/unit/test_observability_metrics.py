"""Unit tests for Prometheus metrics module."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY, CollectorRegistry

from tuteasy.observability.metrics import (
    HTTP_REQUEST_COUNT,
    SEARCH_COUNT,
    MetricsConfig,
    MetricsManager,
    create_metrics_manager,
    get_metrics,
    observe_search_operation,
    record_http_request,
    record_relevance_rerank,
    record_search_results,
)


def sample(name: str, **labels: str) -> float:
    """Current value of a sample in the default registry (0 when absent)."""
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetricsConfig:
    """Tests for MetricsConfig."""

    def test_enabled_by_default(self) -> None:
        """Test metrics are on unless switched off."""
        assert MetricsConfig().enabled is True

    def test_from_env_disabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test METRICS_ENABLED=false switches metrics off."""
        monkeypatch.setenv("METRICS_ENABLED", "false")

        assert MetricsConfig.from_env().enabled is False


class TestMetricsManager:
    """Tests for MetricsManager."""

    def test_initialize(self) -> None:
        """Test initialization."""
        manager = MetricsManager(MetricsConfig())
        manager.initialize(service_name="test", service_version="1.0.0", environment="test")

        assert manager._initialized is True

    def test_initialize_disabled(self) -> None:
        """Test initialization when disabled."""
        manager = MetricsManager(MetricsConfig(enabled=False))

        manager.initialize(service_name="test", service_version="1.0.0", environment="test")

        assert manager._initialized is False

    def test_custom_registry_export(self) -> None:
        """Test a manager exports only its own registry."""
        manager = create_metrics_manager(registry=CollectorRegistry())

        assert manager.get_metrics() == b""

    def test_get_metrics_default_registry(self) -> None:
        """Test global export contains the search metrics."""
        create_metrics_manager()

        output = get_metrics()

        assert isinstance(output, bytes)
        assert b"tuteasy_search_operations_total" in output


class TestSearchMetrics:
    """Tests for search operation metrics."""

    def test_observe_search_operation_success(self) -> None:
        """Test a successful operation is counted as success."""
        before = sample(
            "tuteasy_search_operations_total",
            operation="search_tutors",
            sort_by="rating",
            status="success",
        )

        with observe_search_operation("search_tutors", "rating"):
            pass

        after = sample(
            "tuteasy_search_operations_total",
            operation="search_tutors",
            sort_by="rating",
            status="success",
        )
        assert after == before + 1

    def test_observe_search_operation_error(self) -> None:
        """Test a failing operation is counted as error and re-raised."""
        labels = {"operation": "get_filter_options", "sort_by": "none", "status": "error"}
        before = SEARCH_COUNT.labels(**labels)._value.get()

        with pytest.raises(RuntimeError):
            with observe_search_operation("get_filter_options"):
                raise RuntimeError("database down")

        assert SEARCH_COUNT.labels(**labels)._value.get() == before + 1

    def test_record_search_results(self) -> None:
        """Test result sizes are observed."""
        before = sample("tuteasy_search_result_size_count", operation="get_search_statistics")

        record_search_results("get_search_statistics", 42)

        assert (
            sample("tuteasy_search_result_size_count", operation="get_search_statistics")
            == before + 1
        )

    def test_record_relevance_rerank(self) -> None:
        """Test re-ranked pages are counted."""
        before = sample("tuteasy_relevance_reranks_total")

        record_relevance_rerank()

        assert sample("tuteasy_relevance_reranks_total") == before + 1


class TestHTTPMetrics:
    """Tests for HTTP request metrics."""

    def test_record_http_request(self) -> None:
        """Test requests are counted per label set."""
        labels = {"method": "GET", "endpoint": "/v1/search/tutors", "status_code": "200"}
        before = HTTP_REQUEST_COUNT.labels(**labels)._value.get()

        record_http_request("GET", "/v1/search/tutors", 200, 0.05)

        assert HTTP_REQUEST_COUNT.labels(**labels)._value.get() == before + 1
