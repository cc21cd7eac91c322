"""Structured logging configuration.

This module provides logging configuration for the annotation engine:
- Configurable log levels and output formats (JSON/console)
- Deterministic rendering of set-valued fields (fix trees, region sets)
- Context injection for per-round correlation
- File and console output support
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from enum import StrEnum
from pathlib import Path
from typing import Any, cast

import structlog
from structlog.typing import WrappedLogger


class LogFormat(StrEnum):
    """Log output format options."""

    JSON = "json"
    CONSOLE = "console"


class LogLevel(StrEnum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def normalize_log_value(value: Any) -> Any:
    """Recursively turn sets into sorted lists of strings.

    Fix trees and region sets are logged often; sorting keeps two runs over
    the same input byte-identical in the log.

    Args:
        value: Value to normalize (can be nested dict/list/set)

    Returns:
        Normalized value
    """
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    elif isinstance(value, dict):
        return {k: normalize_log_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return type(value)(normalize_log_value(v) for v in value)
    else:
        return value


def collection_normalizer(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor applying normalize_log_value to every entry."""
    result = normalize_log_value(dict(event_dict))
    return cast(MutableMapping[str, Any], result)


def add_context_processor(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Add the service name and version to all log entries."""
    event_dict["service"] = "null-annotator"

    try:
        from null_annotator._version import __version__

        event_dict["version"] = __version__
    except (ImportError, RuntimeError):
        pass

    return event_dict


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_format: LogFormat | str = LogFormat.CONSOLE,
    file_path: Path | str | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        file_path: Path to log file (if file logging enabled)
        file_enabled: Whether to enable file logging

    Example:
        # Interactive runs
        configure_logging(level="DEBUG", log_format="console")

        # CI runs, collected by a log aggregator
        configure_logging(level="INFO", log_format="json")
    """
    if isinstance(level, str):
        level = LogLevel(level.upper())
    if isinstance(log_format, str):
        log_format = LogFormat(log_format.lower())

    numeric_level = getattr(logging, level.value)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_context_processor,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        collection_normalizer,
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == LogFormat.JSON:
        shared_processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        shared_processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True, exception_formatter=structlog.dev.plain_traceback
            )
        )

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    handlers.append(console_handler)

    if file_enabled and file_path:
        try:
            file_path = Path(file_path)
            file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(file_path)
            file_handler.setLevel(numeric_level)
            handlers.append(file_handler)
        except OSError as e:
            # Continue with console only
            console_logger = logging.getLogger("null_annotator.logging")
            console_logger.warning(f"Could not create log file {file_path}: {e}")

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str | None = None) -> WrappedLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (defaults to caller's module)

    Returns:
        Configured structlog logger
    """
    return cast(WrappedLogger, structlog.get_logger(name))


def bind_context(**kwargs: Any) -> None:
    """Bind contextual variables for all subsequent log calls.

    Example:
        bind_context(iteration=2, group=0)
        log.info("group_verified")  # Includes iteration and group
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove contextual variables.

    Args:
        *keys: Keys to unbind
    """
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound contextual variables."""
    structlog.contextvars.clear_contextvars()


class LogEventNames:
    """Standard log event names for consistency."""

    # Run lifecycle
    ANNOTATOR_STARTING = "annotator_starting"
    ANNOTATOR_FINISHED = "annotator_finished"
    OUTER_ITERATION = "outer_iteration"

    # Build / ingest
    REBUILD_START = "rebuild_start"
    REBUILD_COMPLETE = "rebuild_complete"
    REBUILD_FAILED = "rebuild_failed"
    ROUND_INGESTED = "round_ingested"
    CHECKER_RECORD_MALFORMED = "checker_record_malformed"
    FIX_REJECTED_INVALID = "fix_rejected_invalid"

    # Search
    EXPLORATION_START = "exploration_start"
    EXPLORATION_PASS = "exploration_pass"
    GROUP_VERIFIED = "group_verified"
    FIX_CHURN = "fix_churn"
    REPORT_TAGGED = "report_tagged"
    DESTRUCTIVE_TREE_VETOED = "destructive_tree_vetoed"

    # Downstream
    DOWNSTREAM_POPULATED = "downstream_populated"

    # Injection
    INJECTION_APPLIED = "injection_applied"
    INJECTION_TARGET_NOT_FOUND = "injection_target_not_found"
    WORKSPACE_RESTORED = "workspace_restored"
