"""Apply annotation changes to Java source files."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from null_annotator.injector.changes import AnnotationChange, import_modification
from null_annotator.injector.locator import JavaSourceLocator
from null_annotator.injector.modification import (
    MultiPositionModification,
    OverlappingModificationError,
)
from null_annotator.utils.errors import TargetNotFoundError
from null_annotator.utils.logging import LogEventNames

log = structlog.get_logger()


@dataclass
class InjectionResult:
    """Outcome of one :meth:`Injector.apply` call."""

    applied: list[AnnotationChange] = field(default_factory=list)
    dropped: list[AnnotationChange] = field(default_factory=list)
    changed_files: set[Path] = field(default_factory=set)


class Injector:
    """Rewrites source files with the minimal text change per annotation.

    All spans for a file are computed against its original text and applied
    as one patch, so several changes to one file never invalidate each
    other's offsets. A change whose target cannot be re-located is dropped
    for that file and reported in the result.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    def resolve(self, path: str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self._root / candidate

    def apply(self, changes: Iterable[AnnotationChange]) -> InjectionResult:
        result = InjectionResult()
        by_file: dict[Path, list[AnnotationChange]] = defaultdict(list)
        for change in changes:
            by_file[self.resolve(change.location.path)].append(change)

        for path, file_changes in by_file.items():
            if not path.exists():
                log.warning(
                    LogEventNames.INJECTION_TARGET_NOT_FOUND, path=str(path), error="missing file"
                )
                result.dropped.extend(file_changes)
                continue
            original = path.read_bytes()
            locator = JavaSourceLocator(original, str(path))
            patch = MultiPositionModification()
            imports: set[str] = set()
            for change in file_changes:
                try:
                    modifications = change.compute(locator)
                    staged = MultiPositionModification(list(patch) + modifications)
                except (TargetNotFoundError, OverlappingModificationError) as e:
                    log.warning(
                        LogEventNames.INJECTION_TARGET_NOT_FOUND,
                        path=str(path),
                        location=str(change.location),
                        error=str(e),
                    )
                    result.dropped.append(change)
                    continue
                patch = staged
                result.applied.append(change)
                required = change.required_import(locator) if modifications else None
                if required is not None:
                    imports.add(required)
            # Imports share one anchor, so they go in as a single insertion.
            import_insertion = import_modification(locator, imports)
            if import_insertion is not None:
                patch.add(import_insertion)
            updated = patch.apply(original)
            if updated != original:
                path.write_bytes(updated)
                result.changed_files.add(path)

        log.info(
            LogEventNames.INJECTION_APPLIED,
            applied=len(result.applied),
            dropped=len(result.dropped),
            files=len(result.changed_files),
        )
        return result
