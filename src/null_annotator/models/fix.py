"""Data models for candidate annotation fixes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum

from null_annotator.models.location import Location

# A single path ``(0,)`` addresses the declaration itself.
TOP_LEVEL: tuple[tuple[int, ...], ...] = ((0,),)


class Action(StrEnum):
    """Whether an annotation is added or removed."""

    ADD = "ADD"
    REMOVE = "REMOVE"


@dataclass(frozen=True, eq=False)
class Fix:
    """A location plus the annotation operation to perform there.

    Two fixes are the same fix when they target the same location; the
    annotation payload, the reasons that suggested it and whether it was
    copied by a code generator do not take part in equality.

    ``type_index`` lists position paths into the declared type. ``(0,)`` is
    the declaration; any other path is a sequence of 1-based type-argument
    indices, so ``(2, 1)`` is the first argument of the second argument of
    ``Map<K, List<V>>``, i.e. ``V``.
    """

    location: Location
    annotation: str
    action: Action = Action.ADD
    type_index: tuple[tuple[int, ...], ...] = TOP_LEVEL
    reasons: frozenset[str] = field(default_factory=frozenset)
    generated: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fix):
            return NotImplemented
        return self.location == other.location

    def __hash__(self) -> int:
        return hash(self.location)

    def copy_to(self, location: Location) -> Fix:
        """Return the same annotation operation on another location, marked generated."""
        return replace(self, location=location, generated=True)

    def __str__(self) -> str:
        sign = "+" if self.action == Action.ADD else "-"
        return f"{sign}@{self.annotation.rsplit('.', 1)[-1]} {self.location}"
