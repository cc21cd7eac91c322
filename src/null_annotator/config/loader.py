"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel

from .schema import AnalysisMode, AnnotatorConfig

PATH_SECTIONS = ("target", "build", "downstream", "output")

SectionT = TypeVar("SectionT", bound=BaseModel)


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_config(path: Path) -> AnnotatorConfig:
    """
    Load configuration from YAML file with environment variable substitution.

    Relative paths are resolved against the directory holding the
    configuration file.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated AnnotatorConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open() as f:
        raw_yaml = f.read()

    yaml_with_env = substitute_env_vars(raw_yaml)
    config_dict = yaml.safe_load(yaml_with_env) or {}

    config = AnnotatorConfig.model_validate(config_dict)
    base = path.parent
    logging = config.logging.model_copy(
        update={"file": _resolve_paths(config.logging.file, base)}
    )
    config = config.model_copy(
        update={
            **{name: _resolve_paths(getattr(config, name), base) for name in PATH_SECTIONS},
            "logging": logging,
        }
    )

    validate_config(config)

    return config


def validate_config(config: AnnotatorConfig) -> None:
    """
    Perform additional cross-field validation.

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If the sections are inconsistent
    """
    if not config.build.command:
        raise ValueError("build.command is required")

    if config.search.mode != AnalysisMode.LOCAL and not config.downstream.enabled:
        raise ValueError(
            f"Analysis mode {config.search.mode} needs downstream.enabled set to true"
        )

    if config.downstream.enabled and not config.downstream.command:
        raise ValueError("Downstream analysis enabled but downstream.command missing")

    if config.search.bailout_grace_round and config.search.bailout:
        raise ValueError("search.bailout_grace_round only applies when search.bailout is false")


def _resolve_paths(section: SectionT, base: Path) -> SectionT:
    """Anchor the relative paths of a section at ``base``."""
    update = {
        name: (base / value).resolve()
        for name, value in section
        if isinstance(value, Path) and not value.is_absolute()
    }
    return section.model_copy(update=update) if update else section
