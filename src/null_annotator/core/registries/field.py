"""Field declaration statements of the target module."""

from __future__ import annotations

from pathlib import Path

import structlog

from null_annotator.injector.locator import JavaSourceLocator
from null_annotator.models.field_record import ClassFieldRecord, FieldDeclarationRecord
from null_annotator.models.location import Location, LocationKind
from null_annotator.utils.errors import TargetNotFoundError, ValidationError

log = structlog.get_logger()


class FieldRegistry:
    """Builds :class:`ClassFieldRecord` instances on demand from source files.

    Parsed files and collected records are cached, field names do not change
    when annotations are injected.
    """

    def __init__(self, source_root: Path) -> None:
        self._root = source_root
        self._locators: dict[Path, JavaSourceLocator] = {}
        self._records: dict[tuple[Path, str], ClassFieldRecord | None] = {}

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self._root / candidate

    def _locator(self, path: Path) -> JavaSourceLocator | None:
        if path not in self._locators:
            try:
                source = path.read_bytes()
            except OSError as e:
                log.warning("source_unreadable", path=str(path), error=str(e))
                return None
            self._locators[path] = JavaSourceLocator(source, str(path))
        return self._locators[path]

    def record(self, clazz: str, path: str) -> ClassFieldRecord | None:
        """Return the field record of ``clazz`` declared in ``path``, if it can be found."""
        resolved = self._resolve(path)
        key = (resolved, clazz)
        if key not in self._records:
            locator = self._locator(resolved)
            record = None
            if locator is not None:
                try:
                    record = locator.field_record(clazz)
                except TargetNotFoundError:
                    record = None
            self._records[key] = record
        return self._records[key]

    def declaration(self, location: Location) -> FieldDeclarationRecord | None:
        """Return the declaration statement matching a field location exactly."""
        record = self.record(location.clazz, location.path)
        if record is None:
            return None
        for declaration in record.declarations:
            if declaration.names == location.variables:
                return declaration
        return None

    def validate(self, location: Location) -> None:
        """Check that a field location names an entire declaration statement.

        Non-field locations are accepted unchanged.

        Raises:
            ValidationError: If no statement declares exactly the location's names.
        """
        if location.kind != LocationKind.FIELD:
            return
        record = self.record(location.clazz, location.path)
        if record is None:
            raise ValidationError(f"No field declarations found for {location.clazz}")
        if not record.has_exact_declaration(location.variables):
            raise ValidationError(
                f"Field location {location} does not match a declaration statement of "
                f"{location.clazz}"
            )
