"""Unit tests for structured logging."""

import logging
from unittest.mock import AsyncMock

import structlog

from tuteasy.config.settings import Settings
from tuteasy.core.context import create_context, request_context
from tuteasy.core.logging import (
    LogContext,
    add_request_context,
    drop_color_message_key,
    environment_adder,
    get_logger,
    setup_logging,
)
from tuteasy.search import SearchRequest, TutorAggregates, TutorSearchEngine


class TestAddRequestContext:
    """Tests for add_request_context processor."""

    def test_adds_context_when_available(self):
        """Test request and correlation ids are added when a context is set."""
        ctx = create_context()

        with request_context(ctx):
            result = add_request_context(None, "info", {})

        assert result["request_id"] == str(ctx.request_id)
        assert result["correlation_id"] == str(ctx.correlation_id)

    def test_no_context_available(self):
        """Test graceful handling when no context is set."""
        result = add_request_context(None, "info", {"message": "test"})

        assert result == {"message": "test"}


class TestEnvironmentAdder:
    """Tests for environment_adder."""

    def test_adds_environment(self):
        """Test the bound environment is added to the event dict."""
        add_environment = environment_adder("staging")

        assert add_environment(None, "info", {"event": "x"}) == {
            "event": "x",
            "environment": "staging",
        }

    def test_uses_settings_passed_to_setup(self, capsys):
        """Test entries carry the environment of the configured settings."""
        setup_logging(settings=Settings(ENVIRONMENT="production", log_level="INFO"))

        get_logger("test").info("configured")

        assert '"environment": "production"' in capsys.readouterr().out


class TestDropColorMessageKey:
    """Tests for drop_color_message_key processor."""

    def test_removes_color_message(self):
        """Test uvicorn's color_message is dropped."""
        result = drop_color_message_key(None, "info", {"event": "x", "color_message": "y"})

        assert result == {"event": "x"}


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_sets_root_level(self):
        """Test the root logger follows the configured level."""
        setup_logging(settings=Settings(log_level="WARNING"))

        assert logging.getLogger().level == logging.WARNING

    def test_explicit_level_overrides_settings(self):
        """Test an explicit level wins over settings."""
        setup_logging(log_level="DEBUG", settings=Settings(log_level="ERROR"))

        assert logging.getLogger().level == logging.DEBUG

    def test_sqlalchemy_is_quieted(self):
        """Test SQL statement logging is kept at WARNING."""
        setup_logging(log_level="DEBUG", settings=Settings())

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_json_output_in_production(self, capsys):
        """Test production settings render JSON lines."""
        setup_logging(settings=Settings(ENVIRONMENT="production", log_level="INFO"))

        get_logger("test").info("search_complete", total=3)

        output = capsys.readouterr().out
        assert '"event": "search_complete"' in output
        assert '"total": 3' in output

    def test_stdlib_records_carry_logger_name(self, capsys):
        """Test records from stdlib loggers are rendered with their name."""
        setup_logging(settings=Settings(ENVIRONMENT="production", log_level="INFO"))

        logging.getLogger("uvicorn.error").warning("server warning")

        output = capsys.readouterr().out
        assert '"logger": "uvicorn.error"' in output
        assert '"event": "server warning"' in output

    def test_console_logging_after_setup(self):
        """Test structlog loggers can log once console logging is configured."""
        setup_logging(settings=Settings(ENVIRONMENT="development", log_level="DEBUG"))

        logger = get_logger("tuteasy.test")
        logger.info("search_started", page=1)
        logger.error("search_failed", error="boom")

    async def test_search_engine_logs_after_setup(self):
        """Test engine operations log without error under the configured pipeline."""
        setup_logging(settings=Settings(ENVIRONMENT="development"))
        store = AsyncMock()
        store.count.return_value = 0
        store.find_page.return_value = []
        store.aggregate.return_value = TutorAggregates(
            min_rate=None, max_rate=None, avg_rating=None
        )
        store.experience_values.return_value = []
        store.group_count.return_value = []
        engine = TutorSearchEngine(store)

        page = await engine.search_tutors(SearchRequest())
        stats = await engine.get_search_statistics(SearchRequest())

        assert page.pagination.total == 0
        assert stats.total_results == 0


class TestLogContext:
    """Tests for LogContext."""

    def test_binds_and_unbinds(self):
        """Test values are bound only inside the block."""
        with LogContext(operation="search_tutors"):
            assert structlog.contextvars.get_contextvars()["operation"] == "search_tutors"

        assert "operation" not in structlog.contextvars.get_contextvars()
