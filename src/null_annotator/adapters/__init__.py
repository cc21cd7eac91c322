"""Concrete collaborators: build commands and generated-code handlers."""

from .downstream import CommandDownstreamChecker, LibraryModel
from .lombok import LombokHandler
from .rebuild import CheckerSettings, CommandRebuildTrigger

__all__ = [
    "CheckerSettings",
    "CommandDownstreamChecker",
    "CommandRebuildTrigger",
    "LibraryModel",
    "LombokHandler",
]
