"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    AnalysisMode,
    AnnotationsConfig,
    AnnotatorConfig,
    BuildConfig,
    DownstreamConfig,
    LoggingConfig,
    OutputConfig,
    RetryConfig,
    SearchConfig,
    TargetConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "AnnotatorConfig",
    # Sections
    "TargetConfig",
    "BuildConfig",
    "SearchConfig",
    "AnnotationsConfig",
    "DownstreamConfig",
    "LoggingConfig",
    "RetryConfig",
    "OutputConfig",
    # Enums
    "AnalysisMode",
]
