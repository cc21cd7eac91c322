"""Text modifications computed against unmodified source bytes."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from null_annotator.utils.errors import AnnotatorError


class OverlappingModificationError(AnnotatorError):
    """Two different modifications touch the same bytes."""


@dataclass(frozen=True, order=True)
class Modification:
    """Replace ``source[start:end]`` with ``replacement``.

    An insertion has ``start == end``.
    """

    start: int
    end: int
    replacement: bytes = b""

    def __post_init__(self) -> None:
        if not 0 <= self.start <= self.end:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")

    @classmethod
    def insert(cls, offset: int, text: str) -> Modification:
        return cls(offset, offset, text.encode("utf-8"))

    @classmethod
    def delete(cls, start: int, end: int) -> Modification:
        return cls(start, end)

    def overlaps(self, other: Modification) -> bool:
        if self.start == self.end or other.start == other.end:
            # Two insertions at one offset would be order dependent.
            return self.start == other.start or (
                self.start < other.start < self.end or other.start < self.start < other.end
            )
        return self.start < other.end and other.start < self.end


class MultiPositionModification:
    """A set of modifications to one file, applied as a single patch.

    Every span refers to offsets of the original text. Spans are applied in
    descending start order so that earlier offsets stay valid.
    """

    def __init__(self, modifications: Iterable[Modification] = ()) -> None:
        self._modifications: list[Modification] = []
        for modification in modifications:
            self.add(modification)

    def __len__(self) -> int:
        return len(self._modifications)

    def __iter__(self) -> Iterator[Modification]:
        return iter(sorted(self._modifications, reverse=True))

    def add(self, modification: Modification) -> None:
        """Add a span; an identical span is collapsed into the existing one.

        Raises:
            OverlappingModificationError: If the span overlaps a different span.
        """
        if modification in self._modifications:
            return
        for existing in self._modifications:
            if existing.overlaps(modification):
                raise OverlappingModificationError(
                    f"Modification {modification} overlaps {existing}"
                )
        self._modifications.append(modification)

    def apply(self, source: bytes) -> bytes:
        """Return ``source`` with every span applied."""
        result = source
        for modification in self:
            if modification.end > len(source):
                raise ValueError(f"Span {modification} exceeds source length {len(source)}")
            result = result[: modification.start] + modification.replacement + result[modification.end :]
        return result
