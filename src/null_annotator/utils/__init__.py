"""Utility functions and helpers.

This module provides various utilities for null-annotator:
- errors: Exception taxonomy
- logging: Structured logging setup and event names
- retry: Caller-level retry policy for rebuilds
- subprocess_runner: Safe subprocess execution
"""

from null_annotator.utils.errors import (
    AnnotatorError,
    CommandError,
    CommandTimeoutError,
    IndexStateError,
    RebuildFailure,
    TargetNotFoundError,
    ValidationError,
)
from null_annotator.utils.logging import (
    LogEventNames,
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from null_annotator.utils.subprocess_runner import CommandResult, CommandRunner

__all__ = [
    # Errors
    "AnnotatorError",
    "CommandError",
    "CommandTimeoutError",
    "IndexStateError",
    "RebuildFailure",
    "TargetNotFoundError",
    "ValidationError",
    # Logging
    "LogEventNames",
    "LogFormat",
    "LogLevel",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # Subprocess
    "CommandResult",
    "CommandRunner",
]
