"""Versioned index of checker errors and candidate fixes.

The bank holds two generations: the baseline (the last committed source
state) and the current round. Exploratory rounds replace the current
generation and are compared against the baseline; a baseline save resets
both. Rounds replace each other, they are never merged.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from null_annotator.core.checker_output import CheckerOutput
from null_annotator.models.fix import Fix
from null_annotator.models.region import Error, Region
from null_annotator.utils.errors import IndexStateError
from null_annotator.utils.logging import LogEventNames

log = structlog.get_logger()


@dataclass(frozen=True)
class Diff:
    """Fixes that appeared or disappeared for one member between two generations."""

    added: frozenset[Fix]
    removed: frozenset[Fix]

    @property
    def symmetric(self) -> frozenset[Fix]:
        return self.added | self.removed

    def __bool__(self) -> bool:
        return bool(self.added or self.removed)


@dataclass(frozen=True)
class _Snapshot:
    generation: int
    errors_by_region: dict[Region, frozenset[Error]]
    fixes_by_region: dict[Region, frozenset[Fix]]

    @classmethod
    def of(cls, generation: int, output: CheckerOutput) -> _Snapshot:
        by_region: dict[Region, set[Error]] = {}
        for error in output.errors:
            by_region.setdefault(error.region, set()).add(error)
        return cls(
            generation=generation,
            errors_by_region={region: frozenset(e) for region, e in by_region.items()},
            fixes_by_region=dict(output.fixes_by_region),
        )

    def errors_in(self, region: Region) -> frozenset[Error]:
        return self.errors_by_region.get(region, frozenset())

    def fixes_in(self, region: Region) -> frozenset[Fix]:
        return self.fixes_by_region.get(region, frozenset())


class Bank:
    """Generation-stamped table of per-region errors and fixes."""

    def __init__(self) -> None:
        self._baseline: _Snapshot | None = None
        self._current: _Snapshot | None = None
        self._generation = 0
        self._consumed = True

    @property
    def generation(self) -> int:
        return self._generation

    def save_state(self, output: CheckerOutput, baseline: bool = False) -> None:
        """Ingest one checker round.

        Args:
            output: Parsed checker output of the round
            baseline: Make this round the reference for later comparisons

        Raises:
            IndexStateError: If the previous exploratory round was never consumed,
                or an exploratory round is saved before any baseline.
        """
        if not baseline:
            if self._baseline is None:
                raise IndexStateError("Exploratory round saved before a baseline")
            if not self._consumed:
                raise IndexStateError(
                    f"Round {self._generation} was not consumed before saving a new round"
                )
        self._generation += 1
        snapshot = _Snapshot.of(self._generation, output)
        self._current = snapshot
        if baseline:
            self._baseline = snapshot
            self._consumed = True
        else:
            self._consumed = False
        log.debug(
            LogEventNames.ROUND_INGESTED,
            generation=self._generation,
            baseline=baseline,
            errors=len(output.errors),
            fixes=len(output.fixes),
        )

    def mark_consumed(self) -> None:
        """Declare that the current round's diff has been attributed."""
        self._consumed = True

    def _require(self) -> tuple[_Snapshot, _Snapshot]:
        if self._baseline is None or self._current is None:
            raise IndexStateError("No round has been ingested")
        return self._baseline, self._current

    def count_errors_in_region(self, region: Region) -> int:
        return len(self._require()[1].errors_in(region))

    def compare_region(self, region: Region) -> tuple[int, frozenset[Error]]:
        """Return the error-count change of ``region`` and the errors that newly appeared."""
        baseline, current = self._require()
        before, after = baseline.errors_in(region), current.errors_in(region)
        return len(after) - len(before), after - before

    def diff_since(self, clazz: str, member: str) -> Diff:
        """Fixes that newly appeared or disappeared for ``clazz#member`` since the baseline."""
        baseline, current = self._require()
        region = Region(clazz, member or Region.CLASS_LEVEL)
        before, after = baseline.fixes_in(region), current.fixes_in(region)
        return Diff(added=after - before, removed=before - after)

    def errors(self) -> frozenset[Error]:
        _, current = self._require()
        return frozenset(e for errors in current.errors_by_region.values() for e in errors)

    def fixes(self) -> frozenset[Fix]:
        _, current = self._require()
        return frozenset(f for fixes in current.fixes_by_region.values() for f in fixes)

    def baseline_fixes(self) -> frozenset[Fix]:
        """Fixes suggested for the last committed source state."""
        baseline, _ = self._require()
        return frozenset(f for fixes in baseline.fixes_by_region.values() for f in fixes)
