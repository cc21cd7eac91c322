"""Usage data of the target module, read from the scanner output.

The scanner writes one JSON object per line:

    {"record": "method", "clazz": "a.B", "member": "get()", "path": "a/B.java", ...}
    {"record": "field_use", "region": {"clazz": "a.C", "member": "m()"},
     "clazz": "a.B", "field": "f"}
    {"record": "call", "region": {"clazz": "a.C", "member": "m()"},
     "clazz": "a.B", "member": "get()"}
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from pathlib import Path

import pydantic
import structlog

from null_annotator.models.records import (
    SCANNER_RECORD_ADAPTER,
    CallRecord,
    FieldUseRecord,
    MethodRecord,
    decode_line,
)
from null_annotator.models.region import Region
from null_annotator.utils.logging import LogEventNames

log = structlog.get_logger()


class UsageIndex:
    """Field users, method callers and method metadata of the target module."""

    def __init__(self) -> None:
        self._methods: dict[tuple[str, str], MethodRecord] = {}
        self._field_users: dict[tuple[str, str], set[Region]] = defaultdict(set)
        self._callers: dict[tuple[str, str], set[Region]] = defaultdict(set)
        self._classes: set[str] = set()

    @classmethod
    def from_lines(cls, lines: Iterable[str | bytes]) -> UsageIndex:
        index = cls()
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                record = SCANNER_RECORD_ADAPTER.validate_json(decode_line(line))
            except (UnicodeDecodeError, pydantic.ValidationError) as e:
                log.warning(
                    LogEventNames.CHECKER_RECORD_MALFORMED,
                    stream="scanner",
                    line=number,
                    error=str(e).splitlines()[0],
                )
                continue
            index.add(record)
        return index

    @classmethod
    def load(cls, path: Path) -> UsageIndex:
        """Read a scanner output file; a missing file yields an empty index."""
        if not path.exists():
            log.warning("scanner_output_missing", path=str(path))
            return cls()
        with path.open("rb") as f:
            return cls.from_lines(f)

    def add(self, record: MethodRecord | FieldUseRecord | CallRecord) -> None:
        if isinstance(record, MethodRecord):
            self._methods[(record.clazz, record.member)] = record
            self._classes.add(record.clazz)
        elif isinstance(record, FieldUseRecord):
            self._field_users[(record.clazz, record.field)].add(record.region.to_region())
        else:
            self._callers[(record.clazz, record.member)].add(record.region.to_region())

    @property
    def classes(self) -> frozenset[str]:
        """Flat names of every class declared in the target module."""
        return frozenset(self._classes)

    def method(self, clazz: str, member: str) -> MethodRecord | None:
        return self._methods.get((clazz, member))

    def users_of_field(self, clazz: str, name: str) -> frozenset[Region]:
        return frozenset(self._field_users.get((clazz, name), ()))

    def callers_of(self, clazz: str, member: str) -> frozenset[Region]:
        return frozenset(self._callers.get((clazz, member), ()))

    def is_generated(self, clazz: str, member: str) -> bool:
        method = self.method(clazz, member)
        return method is not None and method.generated
