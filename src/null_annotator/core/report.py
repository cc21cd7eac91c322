"""Exploration state of one candidate fix and its dependents."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import TYPE_CHECKING

from null_annotator.config.schema import AnalysisMode, SearchConfig
from null_annotator.models.fix import Fix
from null_annotator.models.region import Error

if TYPE_CHECKING:
    from null_annotator.core.downstream import DownstreamImpactCache
    from null_annotator.core.registries.region import CompoundRegionRegistry


class Tag(StrEnum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class Report:
    """The evolving record of exploring one fix tree.

    The tree always contains the root and only grows: fixes are never
    removed once added. Reports are identified by their root.
    """

    def __init__(self, root: Fix, local_effect: int = 0) -> None:
        self.root = root
        self.tree: set[Fix] = {root}
        self.local_effect = local_effect
        self.lower_bound = 0
        self.upper_bound = 0
        self.triggered_errors: frozenset[Error] = frozenset()
        self.triggered_fixes: frozenset[Fix] = frozenset()
        self.triggered_fixes_from_downstream: frozenset[Fix] = frozenset()
        self.has_been_processed_once = False
        self.tag = Tag.REJECT

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Report):
            return NotImplemented
        return self.root == other.root

    def __hash__(self) -> int:
        return hash(self.root)

    def __repr__(self) -> str:
        return f"Report(effect={self.local_effect}, root={self.root}, tree={len(self.tree)})"

    @property
    def approved(self) -> bool:
        return self.tag == Tag.APPROVE

    def fixes_for_next_iteration(self) -> frozenset[Fix]:
        """Fixes to add before the next verification round.

        The first round measures the root alone. Later rounds add what the
        last round triggered on the target or downstream and the tree lacks.
        On the target, that is the fixes of the triggered errors plus any fix
        newly suggested in an impacted region.
        """
        if not self.has_been_processed_once:
            return frozenset((self.root,))
        return (self._triggered_on_target() | self.triggered_fixes_from_downstream) - self.tree

    def _triggered_on_target(self) -> frozenset[Fix]:
        return Error.resolving_fixes_of(self.triggered_errors) | self.triggered_fixes

    def requires_further_process(self, config: SearchConfig) -> bool:
        if not self.has_been_processed_once:
            return True
        downstream = self.triggered_fixes_from_downstream
        if downstream and not downstream <= self.tree:
            # Downstream-triggered fixes must be measured on the target too.
            return True
        if self._triggered_on_target() <= self.tree:
            return False
        return not config.bailout or self.local_effect > 0

    def overall_effect(self, mode: AnalysisMode) -> int:
        if mode == AnalysisMode.LOCAL:
            return self.local_effect
        if mode == AnalysisMode.UPPER_BOUND:
            return self.local_effect + self.upper_bound
        return self.local_effect + self.lower_bound

    def grow(self, fixes: Iterable[Fix]) -> frozenset[Fix]:
        """Add fixes to the tree and return those that were new.

        Membership guards growth, so a fix re-triggering an ancestor is a no-op.
        """
        added = frozenset(fix for fix in fixes if fix not in self.tree)
        self.tree |= added
        return added

    def reflect_generated_changes(self, registry: CompoundRegionRegistry) -> frozenset[Fix]:
        """Absorb fixes code generators copy from the tree's fixes."""
        return self.grow(registry.extend_fixes(self.tree))

    def contains_destructive_change(self, cache: DownstreamImpactCache) -> bool:
        return any(cache.triggers_unresolvable_errors(fix) for fix in self.tree)

    def compute_downstream_bounds(self, cache: DownstreamImpactCache) -> None:
        self.lower_bound = cache.lower_bound(self.tree)
        self.upper_bound = cache.upper_bound(self.tree)
