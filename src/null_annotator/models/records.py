"""Pydantic models for the machine-readable record streams.

Two JSON-lines streams are consumed:
- checker output: ``error`` and ``fix`` records, re-read every round
- scanner output: ``method``, ``field_use`` and ``call`` records, read once

Each line carries a ``record`` discriminator.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from null_annotator.models.fix import Action, Fix
from null_annotator.models.location import Location, LocationKind
from null_annotator.models.region import Region


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class RegionRecord(_Record):
    clazz: str
    member: str = Region.CLASS_LEVEL

    def to_region(self) -> Region:
        return Region(self.clazz, self.member or Region.CLASS_LEVEL)


class LocationRecord(_Record):
    kind: LocationKind
    path: str
    clazz: str
    member: str = ""
    variables: list[str] = []
    index: int = -1

    def to_location(self) -> Location:
        """Build the domain location.

        Raises:
            ValidationError: If the record describes a malformed location.
        """
        return Location(
            kind=self.kind,
            path=self.path,
            clazz=self.clazz,
            member=self.member,
            variables=frozenset(self.variables),
            index=self.index,
        )

    @classmethod
    def from_location(cls, location: Location) -> LocationRecord:
        return cls(
            kind=location.kind,
            path=location.path,
            clazz=location.clazz,
            member=location.member,
            variables=sorted(location.variables),
            index=location.index,
        )


class ErrorRecord(_Record):
    record: Literal["error"]
    kind: str
    message: str = ""
    region: RegionRecord
    offset: int = 0


class ErrorLink(_Record):
    """Identifies the error a candidate fix resolves."""

    kind: str
    region: RegionRecord
    offset: int = 0


class FixRecord(_Record):
    record: Literal["fix"]
    location: LocationRecord
    annotation: str
    action: Action = Action.ADD
    type_index: list[list[int]] = [[0]]
    reason: str | None = None
    error: ErrorLink | None = None

    def to_fix(self) -> Fix:
        return Fix(
            location=self.location.to_location(),
            annotation=self.annotation,
            action=self.action,
            type_index=tuple(tuple(path) for path in self.type_index) or ((0,),),
            reasons=frozenset((self.reason,)) if self.reason else frozenset(),
        )


class MethodRecord(_Record):
    record: Literal["method"]
    clazz: str
    member: str
    path: str
    is_public: bool = False
    returns_primitive: bool = False
    generated: bool = False


class FieldUseRecord(_Record):
    """``region`` reads or writes field ``field`` of ``clazz``."""

    record: Literal["field_use"]
    region: RegionRecord
    clazz: str
    field: str


class CallRecord(_Record):
    """``region`` calls method ``member`` of ``clazz``."""

    record: Literal["call"]
    region: RegionRecord
    clazz: str
    member: str


CheckerRecord = Annotated[ErrorRecord | FixRecord, Field(discriminator="record")]
ScannerRecord = Annotated[
    MethodRecord | FieldUseRecord | CallRecord, Field(discriminator="record")
]

CHECKER_RECORD_ADAPTER: TypeAdapter[ErrorRecord | FixRecord] = TypeAdapter(CheckerRecord)
SCANNER_RECORD_ADAPTER: TypeAdapter[MethodRecord | FieldUseRecord | CallRecord] = TypeAdapter(
    ScannerRecord
)


def decode_line(line: str | bytes) -> str:
    """Decode one stream line; raises UnicodeDecodeError for invalid UTF-8."""
    return line.decode("utf-8") if isinstance(line, bytes) else line
