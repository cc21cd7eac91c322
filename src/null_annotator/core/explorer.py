"""Fix-tree search: grows and measures reports until they converge.

Each verification pass:
1. grows every pending report's tree with the fixes its last round triggered
2. absorbs fixes copied by code generators
3. groups the pending reports into independent batches
4. per batch: applies the trees, rebuilds, ingests, attributes per-region
   effect deltas to each report, reverts the trees
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Sequence

import structlog

from null_annotator.config.schema import SearchConfig
from null_annotator.core.bank import Bank
from null_annotator.core.checker_output import CheckerOutput
from null_annotator.core.downstream import DownstreamImpactCache
from null_annotator.core.registries.region import CompoundRegionRegistry
from null_annotator.core.report import Report
from null_annotator.core.scheduler import BatchScheduler
from null_annotator.injector.workspace import SourceWorkspace
from null_annotator.models.fix import Fix
from null_annotator.models.region import Error
from null_annotator.utils.logging import LogEventNames, bind_context, unbind_context

log = structlog.get_logger()

Verifier = Callable[[Sequence[str]], Awaitable[CheckerOutput]]


class FixTreeExplorer:
    """Explores candidate fixes with as few rebuilds as possible.

    Example:
        explorer = FixTreeExplorer(config.search, bank, registry, workspace, verify)
        reports = await explorer.explore(candidates)
    """

    def __init__(
        self,
        config: SearchConfig,
        bank: Bank,
        registry: CompoundRegionRegistry,
        workspace: SourceWorkspace,
        verify: Verifier,
        downstream: DownstreamImpactCache | None = None,
    ) -> None:
        """Initialize the explorer.

        Args:
            config: Search depth, analysis mode and bailout policy
            bank: Error/fix index holding the committed baseline
            registry: Region registry used for scheduling and attribution
            workspace: Source tree the trees are speculatively applied to
            verify: Rebuilds with the given work list and returns the checker output
            downstream: Downstream impact cache, when dependency analysis is enabled
        """
        self._config = config
        self._bank = bank
        self._registry = registry
        self._workspace = workspace
        self._verify = verify
        self._downstream = downstream
        self._scheduler = BatchScheduler(registry)

    async def explore(self, fixes: Iterable[Fix]) -> list[Report]:
        """Create one report per distinct fix and explore all of them.

        Runs at most ``depth + 1`` passes: the first measures each root
        alone, every further pass measures grown trees.

        Raises:
            RebuildFailure: If a rebuild fails; source files are restored first.
            IndexStateError: If rounds were ingested out of order.
        """
        reports = list(dict.fromkeys(Report(fix) for fix in fixes))
        log.info(LogEventNames.EXPLORATION_START, reports=len(reports), depth=self._config.depth)

        for number in range(self._config.depth + 1):
            pending = [r for r in reports if r.requires_further_process(self._config)]
            if not pending:
                break
            await self._run_pass(number, pending)

        if self._config.bailout_grace_round and not self._config.bailout:
            pending = [
                r
                for r in reports
                if r.local_effect <= 0 and r.requires_further_process(self._config)
            ]
            if pending:
                await self._run_pass(self._config.depth + 1, pending)

        return reports

    async def _run_pass(self, number: int, pending: list[Report]) -> None:
        for report in pending:
            report.grow(report.fixes_for_next_iteration())
            report.reflect_generated_changes(self._registry)
        groups = self._scheduler.schedule(pending)
        log.info(
            LogEventNames.EXPLORATION_PASS,
            pass_number=number,
            reports=len(pending),
            groups=len(groups),
        )
        for index, group in enumerate(groups):
            bind_context(group=index)
            try:
                await self._verify_group(group)
            finally:
                unbind_context("group")

    async def _verify_group(self, group: list[Report]) -> None:
        fixes: set[Fix] = set()
        for report in group:
            fixes |= report.tree
        regions = self._registry.impacted_regions_of(fixes)
        work_list = sorted({region.clazz for region in regions})

        async with self._workspace.speculative(fixes):
            output = await self._verify(work_list)

        self._bank.save_state(output)
        try:
            for report in group:
                await self._attribute(report)
        finally:
            self._bank.mark_consumed()
        log.info(LogEventNames.GROUP_VERIFIED, reports=len(group), fixes=len(fixes))

    async def _attribute(self, report: Report) -> None:
        effect = 0
        triggered: set[Error] = set()
        appeared: set[Fix] = set()
        for region in sorted(self._registry.impacted_regions_of(report.tree)):
            delta, added = self._bank.compare_region(region)
            effect += delta
            triggered |= added
            diff = self._bank.diff_since(region.clazz, region.member)
            if diff:
                log.debug(
                    LogEventNames.FIX_CHURN,
                    region=str(region),
                    added=len(diff.added),
                    removed=len(diff.removed),
                )
                appeared |= diff.added
        report.local_effect = effect
        report.triggered_errors = frozenset(triggered)
        report.triggered_fixes = frozenset(appeared)
        if self._downstream is not None:
            await self._downstream.populate(report.tree)
            report.compute_downstream_bounds(self._downstream)
            report.triggered_fixes_from_downstream = self._downstream.triggered_fixes_on_target(
                report.tree
            )
        report.has_been_processed_once = True
