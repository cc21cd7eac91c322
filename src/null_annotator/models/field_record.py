"""Data models for field declaration statements of a class."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class FieldDeclarationRecord:
    """One field declaration statement, e.g. ``public Object a, b;``."""

    names: frozenset[str]
    is_primitive: bool = False
    is_public: bool = False

    @property
    def is_public_non_primitive(self) -> bool:
        """Public reference-typed fields are visible to downstream consumers."""
        return self.is_public and not self.is_primitive


@dataclass
class ClassFieldRecord:
    """All field declaration statements of one owning type.

    A single statement can declare several fields at once; a field location
    must name that statement's entire name set.
    """

    clazz: str
    path: str
    declarations: set[FieldDeclarationRecord] = field(default_factory=set)

    def add(self, declaration: FieldDeclarationRecord) -> None:
        self.declarations.add(declaration)

    def has_exact_declaration(self, names: Iterable[str]) -> bool:
        """Check for a statement declaring exactly ``names``.

        For ``Object a, b, c;`` the call with ``{"a", "b", "c"}`` returns True,
        ``{"a", "b"}`` or ``{"a"}`` return False.
        """
        wanted = frozenset(names)
        return any(decl.names == wanted for decl in self.declarations)

    def declaration_of(self, name: str) -> FieldDeclarationRecord | None:
        """Return the statement declaring ``name``, if any."""
        for decl in self.declarations:
            if name in decl.names:
                return decl
        return None
