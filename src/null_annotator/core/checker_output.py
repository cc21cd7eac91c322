"""Parser for the per-round checker output stream."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from pathlib import Path

import pydantic
import structlog

from null_annotator.core.registries.field import FieldRegistry
from null_annotator.models.fix import Fix
from null_annotator.models.records import (
    CHECKER_RECORD_ADAPTER,
    ErrorRecord,
    FixRecord,
    decode_line,
)
from null_annotator.models.region import Error, Region
from null_annotator.utils.errors import ValidationError
from null_annotator.utils.logging import LogEventNames

log = structlog.get_logger()

ErrorKey = tuple[str, Region, int]


@dataclass(frozen=True)
class CheckerOutput:
    """Errors and candidate fixes of one checker round.

    ``fixes_by_region`` indexes each fix under the region of the error it
    resolves, or under its own declaration when the checker linked none.
    """

    errors: frozenset[Error] = frozenset()
    fixes_by_region: dict[Region, frozenset[Fix]] = field(default_factory=dict)

    @property
    def fixes(self) -> frozenset[Fix]:
        return frozenset(fix for fixes in self.fixes_by_region.values() for fix in fixes)


class CheckerOutputParser:
    """Reads ``error`` and ``fix`` JSON-lines records.

    Malformed records and fixes naming no real declaration are skipped with
    a warning; the round continues.
    """

    def __init__(self, field_registry: FieldRegistry | None = None) -> None:
        self._field_registry = field_registry

    def read(self, path: Path) -> CheckerOutput:
        """Parse a checker output file; a missing file is an empty round."""
        if not path.exists():
            log.warning("checker_output_missing", path=str(path))
            return CheckerOutput()
        with path.open("rb") as f:
            return self.parse(f)

    def parse(self, lines: Iterable[str | bytes]) -> CheckerOutput:
        error_records: dict[ErrorKey, ErrorRecord] = {}
        fixes: dict[Fix, Fix] = {}
        linked: dict[ErrorKey, set[Fix]] = defaultdict(set)
        unlinked: set[Fix] = set()

        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                record = CHECKER_RECORD_ADAPTER.validate_json(decode_line(line))
            except (UnicodeDecodeError, pydantic.ValidationError) as e:
                log.warning(
                    LogEventNames.CHECKER_RECORD_MALFORMED,
                    stream="checker",
                    line=number,
                    error=str(e).splitlines()[0],
                )
                continue
            if isinstance(record, ErrorRecord):
                key = (record.kind, record.region.to_region(), record.offset)
                error_records.setdefault(key, record)
                continue
            fix = self._to_fix(record, number)
            if fix is None:
                continue
            if fix in fixes:
                known = fixes[fix]
                fix = replace(known, reasons=known.reasons | fix.reasons)
            fixes[fix] = fix
            if record.error is not None:
                link = record.error
                linked[(link.kind, link.region.to_region(), link.offset)].add(fix)
            else:
                unlinked.add(fix)

        errors: set[Error] = set()
        fixes_by_region: dict[Region, set[Fix]] = defaultdict(set)
        for key, record in error_records.items():
            resolving = frozenset(fixes[f] for f in linked.get(key, ()))
            region = key[1]
            errors.add(Error(record.kind, region, record.offset, record.message, resolving))
            fixes_by_region[region] |= resolving
        for key, linked_fixes in linked.items():
            if key not in error_records:
                fixes_by_region[key[1]] |= {fixes[f] for f in linked_fixes}
        for fix in unlinked:
            location = fix.location
            fixes_by_region[Region(location.clazz, location.member or Region.CLASS_LEVEL)].add(
                fixes[fix]
            )

        return CheckerOutput(
            errors=frozenset(errors),
            fixes_by_region={region: frozenset(f) for region, f in fixes_by_region.items()},
        )

    def _to_fix(self, record: FixRecord, line: int) -> Fix | None:
        try:
            fix = record.to_fix()
            if self._field_registry is not None:
                self._field_registry.validate(fix.location)
        except ValidationError as e:
            log.warning(LogEventNames.FIX_REJECTED_INVALID, line=line, error=str(e))
            return None
        return fix
