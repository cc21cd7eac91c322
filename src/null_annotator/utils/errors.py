"""Exception taxonomy for the annotation engine.

Recovery scope differs per error:
- ValidationError: a single fix is dropped, ingestion continues
- TargetNotFoundError: a single edit is dropped for that file, the round continues
- RebuildFailure: the round is aborted and source files are restored
- IndexStateError: fatal to the run, effect attribution would be unsound

A destructive downstream effect is not an exception; it is a REJECT tag.
"""

from __future__ import annotations


class AnnotatorError(Exception):
    """Base exception for all annotator errors."""


class ValidationError(AnnotatorError):
    """A location or fix record does not describe a real declaration."""


class IndexStateError(AnnotatorError):
    """A checker round was ingested out of order."""


class TargetNotFoundError(AnnotatorError):
    """A declaration could not be re-located in the current source text.

    Attributes:
        path: Source file that was searched.
        target: Human readable description of what was searched for.
    """

    def __init__(self, path: str, target: str) -> None:
        super().__init__(f"Could not locate {target} in {path}")
        self.path = path
        self.target = target


class RebuildFailure(AnnotatorError):
    """The external rebuild reported failure."""


class CommandError(AnnotatorError):
    """An external command could not be executed or exited non-zero.

    Attributes:
        return_code: Exit status of the command, if it ran.
    """

    def __init__(self, message: str, return_code: int | None = None) -> None:
        super().__init__(message)
        self.return_code = return_code


class CommandTimeoutError(CommandError):
    """An external command exceeded its timeout."""


__all__ = [
    "AnnotatorError",
    "CommandError",
    "CommandTimeoutError",
    "IndexStateError",
    "RebuildFailure",
    "TargetNotFoundError",
    "ValidationError",
]
