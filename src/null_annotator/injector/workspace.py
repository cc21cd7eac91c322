"""The source tree as an exclusively mutated resource."""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator, Iterable
from pathlib import Path

import structlog

from null_annotator.injector.changes import AnnotationChange
from null_annotator.injector.injector import InjectionResult, Injector
from null_annotator.models.fix import Fix
from null_annotator.utils.logging import LogEventNames

log = structlog.get_logger()


class SourceWorkspace:
    """Applies fixes to the source tree, either speculatively or for good.

    Speculative edits are always reverted when the context exits, whether it
    exits normally, by exception or by cancellation, so the tree matches the
    last committed state between rounds.
    """

    def __init__(self, root: Path, injector: Injector | None = None) -> None:
        self.root = root
        self._injector = injector or Injector(root)

    @staticmethod
    def _changes(fixes: Iterable[Fix]) -> list[AnnotationChange]:
        return [AnnotationChange.from_fix(fix) for fix in fixes if not fix.generated]

    @contextlib.asynccontextmanager
    async def speculative(self, fixes: Iterable[Fix]) -> AsyncIterator[InjectionResult]:
        changes = self._changes(fixes)
        paths = {self._injector.resolve(change.location.path) for change in changes}
        snapshot: dict[Path, bytes] = {path: path.read_bytes() for path in paths if path.exists()}
        try:
            yield self._injector.apply(changes)
        finally:
            for path, content in snapshot.items():
                if path.read_bytes() != content:
                    path.write_bytes(content)
            log.debug(LogEventNames.WORKSPACE_RESTORED, files=len(snapshot))

    def commit(self, fixes: Iterable[Fix]) -> InjectionResult:
        """Apply fixes permanently."""
        return self._injector.apply(self._changes(fixes))
