"""Tests for the logging configuration module."""

from pathlib import Path

import structlog

from null_annotator.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    collection_normalizer,
    configure_logging,
    get_logger,
    normalize_log_value,
    unbind_context,
)


class TestNormalizeLogValue:
    """Tests for normalize_log_value function."""

    def test_sets_become_sorted_lists(self) -> None:
        """Test that sets render in a stable order."""
        assert normalize_log_value({"b", "a", "c"}) == ["a", "b", "c"]
        assert normalize_log_value(frozenset({3, 1})) == ["1", "3"]

    def test_nested_dict(self) -> None:
        """Test that nested dicts are normalized recursively."""
        data = {"tree": {"regions": {"test.Main#m2()", "test.Main#m1()"}}}
        assert normalize_log_value(data) == {
            "tree": {"regions": ["test.Main#m1()", "test.Main#m2()"]}
        }

    def test_list_and_tuple_keep_type(self) -> None:
        """Test that sequences keep their type."""
        assert normalize_log_value([{"b", "a"}]) == [["a", "b"]]
        assert normalize_log_value(("x", 1)) == ("x", 1)

    def test_scalars_pass_through(self) -> None:
        """Test that scalars are unchanged."""
        assert normalize_log_value(42) == 42
        assert normalize_log_value(None) is None
        assert normalize_log_value("text") == "text"


class TestCollectionNormalizer:
    """Tests for the structlog processor."""

    def test_processor_normalizes_event(self) -> None:
        """Test that every event entry is normalized."""
        event = {"event": "group_verified", "classes": {"b.B", "a.A"}, "fixes": 2}
        result = collection_normalizer(None, "info", event)  # type: ignore[arg-type]
        assert result["classes"] == ["a.A", "b.B"]
        assert result["fixes"] == 2
        assert result["event"] == "group_verified"


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_with_console_format(self) -> None:
        """Test configuration with console format."""
        configure_logging(level=LogLevel.DEBUG, log_format=LogFormat.CONSOLE)
        # Should not raise

    def test_configure_with_json_format(self) -> None:
        """Test configuration with JSON format."""
        configure_logging(level=LogLevel.INFO, log_format=LogFormat.JSON)
        # Should not raise

    def test_configure_with_string_values(self) -> None:
        """Test configuration with string values."""
        configure_logging(level="warning", log_format="JSON")
        # Should not raise

    def test_configure_with_file_logging(self, tmp_path: Path) -> None:
        """Test configuration with file logging."""
        log_file = tmp_path / "logs" / "annotator.log"
        configure_logging(
            level=LogLevel.INFO,
            log_format=LogFormat.JSON,
            file_path=log_file,
            file_enabled=True,
        )
        assert log_file.parent.exists()


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_returns_bound_logger(self) -> None:
        """Test that get_logger returns a structlog logger."""
        configure_logging()  # Ensure logging is configured
        log = get_logger("test")
        assert log is not None


class TestContextFunctions:
    """Tests for context binding functions."""

    def test_bind_and_clear_context(self) -> None:
        """Test binding and clearing context."""
        bind_context(iteration=1, group=0)
        assert structlog.contextvars.get_contextvars() == {"iteration": 1, "group": 0}
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_unbind_context(self) -> None:
        """Test unbinding specific context keys."""
        bind_context(iteration=2, group=1)
        unbind_context("group")
        assert structlog.contextvars.get_contextvars() == {"iteration": 2}
        clear_context()


class TestLogLevel:
    """Tests for LogLevel enum."""

    def test_log_levels(self) -> None:
        """Test that all expected log levels exist."""
        assert LogLevel.DEBUG.value == "DEBUG"
        assert LogLevel.INFO.value == "INFO"
        assert LogLevel.WARNING.value == "WARNING"
        assert LogLevel.ERROR.value == "ERROR"
        assert LogLevel.CRITICAL.value == "CRITICAL"


class TestLogFormat:
    """Tests for LogFormat enum."""

    def test_log_formats(self) -> None:
        """Test that all expected formats exist."""
        assert LogFormat.JSON.value == "json"
        assert LogFormat.CONSOLE.value == "console"
