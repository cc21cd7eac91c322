"""Protocol definitions for pluggable collaborators."""

from .downstream import DownstreamChecker
from .generated_code import GeneratedCodeHandler
from .rebuild import RebuildTrigger

__all__ = ["DownstreamChecker", "GeneratedCodeHandler", "RebuildTrigger"]
