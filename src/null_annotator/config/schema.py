"""Pydantic models for configuration schema."""

from enum import StrEnum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisMode(StrEnum):
    """How downstream bounds take part in a report's overall effect."""

    LOCAL = "LOCAL"
    UPPER_BOUND = "UPPER_BOUND"
    LOWER_BOUND = "LOWER_BOUND"


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True)


class TargetConfig(_Section):
    """Target module configuration."""

    source_root: Path = Path(".")
    scanner_output: Path = Path("annotator-out/scanner.jsonl")
    checker_output: Path = Path("annotator-out/errors.jsonl")


class BuildConfig(_Section):
    """Rebuild trigger configuration."""

    command: str = ""
    checker_config: Path = Path("annotator-out/checker.json")
    timeout: int = Field(3600, ge=1, description="Rebuild timeout in seconds")


class SearchConfig(_Section):
    """Fix-tree search configuration."""

    depth: int = Field(5, ge=0, description="Growth passes after the seed is measured")
    mode: AnalysisMode = AnalysisMode.LOCAL
    bailout: bool = True
    bailout_grace_round: bool = Field(
        False,
        description="Allow one pass past the depth bound for non-positive trees when bailout is off",
    )


class AnnotationsConfig(_Section):
    """Annotation names."""

    nullable: str = "javax.annotation.Nullable"

    @field_validator("nullable")
    @classmethod
    def validate_nullable(cls, v: str) -> str:
        """Annotations are injected by fully-qualified name."""
        if "." not in v or v.startswith(".") or v.endswith("."):
            raise ValueError(f"Annotation must be fully qualified: {v}")
        return v


class DownstreamConfig(_Section):
    """Downstream dependency analysis configuration."""

    enabled: bool = False
    command: str = ""
    library_model: Path = Path("annotator-out/library-model.json")
    checker_output: Path = Path("annotator-out/downstream-errors.jsonl")
    timeout: int = Field(3600, ge=1)


class FileLoggingConfig(_Section):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("annotator-out/annotator.log")


class LoggingConfig(_Section):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "console"
    file: FileLoggingConfig = FileLoggingConfig()


class RetryConfig(_Section):
    """Retry policy for the rebuild call."""

    max_attempts: int = Field(1, ge=1, le=10)
    initial_delay: float = Field(1.0, ge=0.1, le=10.0)
    max_delay: float = Field(30.0, ge=1.0, le=300.0)


class OutputConfig(_Section):
    """Where the approved work list is written."""

    path: Path = Path("annotator-out/approved.json")


class AnnotatorConfig(BaseSettings):
    """Root configuration for null-annotator."""

    target: TargetConfig = TargetConfig()
    build: BuildConfig = BuildConfig()
    search: SearchConfig = SearchConfig()
    annotations: AnnotationsConfig = AnnotationsConfig()
    downstream: DownstreamConfig = DownstreamConfig()
    logging: LoggingConfig = LoggingConfig()
    retry: RetryConfig = RetryConfig()
    output: OutputConfig = OutputConfig()

    model_config = SettingsConfigDict(
        env_prefix="NULL_ANNOTATOR_",
        env_nested_delimiter="__",
        frozen=True,
    )
