"""Data models for program locations targeted by annotation edits."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from null_annotator.utils.errors import ValidationError


class LocationKind(StrEnum):
    """Kind of declaration a location points to."""

    FIELD = "FIELD"
    METHOD_RETURN = "METHOD_RETURN"
    PARAMETER = "PARAMETER"
    LOCAL_VARIABLE = "LOCAL_VARIABLE"


@dataclass(frozen=True)
class Location:
    """Exact program position a candidate edit targets.

    ``clazz`` is the flat name of the owning type (inner types separated by
    ``$``). ``member`` is the enclosing method signature, e.g.
    ``"run(java.lang.String,int[])"``, and is empty for fields. ``variables``
    holds every name co-declared by the target statement; a field location
    naming a subset of a declaration's names is a different location.
    """

    kind: LocationKind
    path: str
    clazz: str
    member: str = ""
    variables: frozenset[str] = field(default_factory=frozenset)
    index: int = -1

    def __post_init__(self) -> None:
        if not self.clazz:
            raise ValidationError(f"Location without owning type: {self.path}")
        if self.kind == LocationKind.FIELD and not self.variables:
            raise ValidationError(f"Field location on {self.clazz} names no variables")
        if self.kind != LocationKind.FIELD and not self.member:
            raise ValidationError(f"{self.kind} location on {self.clazz} names no method")
        if self.kind == LocationKind.PARAMETER and self.index < 0:
            raise ValidationError(f"Parameter location on {self.clazz}.{self.member} has no index")
        if self.kind == LocationKind.LOCAL_VARIABLE and len(self.variables) != 1:
            raise ValidationError(
                f"Local variable location on {self.clazz}.{self.member} must name one variable"
            )

    @classmethod
    def on_field(cls, path: str, clazz: str, variables: Iterable[str]) -> Location:
        return cls(LocationKind.FIELD, path, clazz, variables=frozenset(variables))

    @classmethod
    def on_method(cls, path: str, clazz: str, method: str) -> Location:
        return cls(LocationKind.METHOD_RETURN, path, clazz, member=method)

    @classmethod
    def on_parameter(cls, path: str, clazz: str, method: str, index: int) -> Location:
        return cls(LocationKind.PARAMETER, path, clazz, member=method, index=index)

    @classmethod
    def on_local_variable(cls, path: str, clazz: str, method: str, name: str) -> Location:
        return cls(
            LocationKind.LOCAL_VARIABLE, path, clazz, member=method, variables=frozenset((name,))
        )

    @property
    def method_name(self) -> str:
        """Name part of the member signature, without parameters."""
        return self.member.split("(", 1)[0]

    def __str__(self) -> str:
        if self.kind == LocationKind.FIELD:
            return f"{self.clazz}#{{{','.join(sorted(self.variables))}}}"
        if self.kind == LocationKind.PARAMETER:
            return f"{self.clazz}#{self.member}@{self.index}"
        if self.kind == LocationKind.LOCAL_VARIABLE:
            return f"{self.clazz}#{self.member}:{next(iter(self.variables))}"
        return f"{self.clazz}#{self.member}"
