"""Data models for regions and checker errors."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from typing import ClassVar

from null_annotator.models.fix import Fix


@dataclass(frozen=True, order=True)
class Region:
    """A lexical scope (owning type + member) where an error can be observed."""

    CLASS_LEVEL: ClassVar[str] = "null"

    clazz: str
    member: str

    @property
    def is_class_level(self) -> bool:
        """Field initializers and static blocks live in the class-level region."""
        return self.member == self.CLASS_LEVEL

    def __str__(self) -> str:
        return f"{self.clazz}#{self.member}"


@dataclass(frozen=True)
class Error:
    """A nullability error reported by the checker.

    Identity is ``(kind, region, offset)``; the offset disambiguates several
    errors of one kind in the same region.
    """

    kind: str
    region: Region
    offset: int
    message: str = field(default="", compare=False)
    resolving_fixes: frozenset[Fix] = field(default_factory=frozenset, compare=False)

    def is_resolvable_with(self, fixes: Collection[Fix]) -> bool:
        """Return True if applying ``fixes`` resolves this error."""
        return bool(self.resolving_fixes) and all(fix in fixes for fix in self.resolving_fixes)

    @staticmethod
    def resolving_fixes_of(errors: Iterable[Error]) -> frozenset[Fix]:
        """Union of the resolving fixes of all given errors."""
        return frozenset(fix for error in errors for fix in error.resolving_fixes)
