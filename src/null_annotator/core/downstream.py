"""Estimated impact of fixes on modules depending on the target.

Making a public method return or a public field nullable can introduce
errors in dependent modules, which are not rebuilt with the target. The
cache measures every such member once against a fixed snapshot of the
dependents and answers bound queries for any tree from memory.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass

import structlog

from null_annotator.core.registries.field import FieldRegistry
from null_annotator.core.usage_index import UsageIndex
from null_annotator.interfaces.downstream import DownstreamChecker
from null_annotator.models.fix import Action, Fix
from null_annotator.models.location import Location, LocationKind
from null_annotator.models.region import Error
from null_annotator.utils.logging import LogEventNames

log = structlog.get_logger()


@dataclass(frozen=True)
class DownstreamImpact:
    """Errors one fix triggers in dependent modules, relative to their baseline."""

    fix: Fix
    triggered_errors: frozenset[Error]


class DownstreamImpactCache:
    """Memoized downstream impact per ``(location, action)``."""

    def __init__(
        self,
        checker: DownstreamChecker,
        usage: UsageIndex,
        field_registry: FieldRegistry,
    ) -> None:
        self._checker = checker
        self._usage = usage
        self._field_registry = field_registry
        self._baseline: frozenset[Error] | None = None
        self._impacts: dict[tuple[Location, Action], DownstreamImpact] = {}

    def is_relevant(self, fix: Fix) -> bool:
        """Public members with a reference type are visible to dependents."""
        location = fix.location
        if location.kind == LocationKind.METHOD_RETURN:
            method = self._usage.method(location.clazz, location.member)
            return method is not None and method.is_public and not method.returns_primitive
        if location.kind == LocationKind.FIELD:
            declaration = self._field_registry.declaration(location)
            return declaration is not None and declaration.is_public_non_primitive
        return False

    async def populate(self, fixes: Iterable[Fix]) -> None:
        """Measure every relevant fix not measured yet.

        Raises:
            RebuildFailure: If the downstream build fails
        """
        if self._baseline is None:
            self._baseline = await self._checker.check(())
        measured = 0
        for fix in fixes:
            key = (fix.location, fix.action)
            if key in self._impacts or not self.is_relevant(fix):
                continue
            errors = await self._checker.check((fix,))
            self._impacts[key] = DownstreamImpact(fix, errors - self._baseline)
            measured += 1
        log.info(
            LogEventNames.DOWNSTREAM_POPULATED,
            measured=measured,
            cached=len(self._impacts),
            baseline_errors=len(self._baseline),
        )

    def impact_of(self, fix: Fix) -> DownstreamImpact | None:
        return self._impacts.get((fix.location, fix.action))

    def _triggered(self, tree: Iterable[Fix]) -> list[Error]:
        errors: list[Error] = []
        for fix in tree:
            impact = self.impact_of(fix)
            if impact is not None:
                errors.extend(impact.triggered_errors)
        return errors

    def upper_bound(self, tree: Collection[Fix]) -> int:
        """Every triggered error counts, once per fix triggering it."""
        return len(self._triggered(tree))

    def lower_bound(self, tree: Collection[Fix]) -> int:
        """Distinct triggered errors the tree itself does not resolve."""
        return len({e for e in self._triggered(tree) if not e.is_resolvable_with(tree)})

    def _on_target(self, fixes: Iterable[Fix]) -> frozenset[Fix]:
        classes = self._usage.classes
        return frozenset(fix for fix in fixes if fix.location.clazz in classes)

    def triggered_fixes_on_target(self, tree: Collection[Fix]) -> frozenset[Fix]:
        """Target-module fixes that resolve errors the tree triggers downstream."""
        return self._on_target(Error.resolving_fixes_of(self._triggered(tree)))

    def triggers_unresolvable_errors(self, fix: Fix) -> bool:
        """True if ``fix`` triggers a downstream error no target-module fix resolves."""
        impact = self.impact_of(fix)
        if impact is None:
            return False
        return any(not self._on_target(e.resolving_fixes) for e in impact.triggered_errors)
