"""Annotator orchestrator that coordinates all components.

This module implements the outer loop of the engine:
- Builds the baseline and ingests its checker output
- Explores every new candidate fix with the fix-tree explorer
- Tags each report, vetoing trees that are destructive downstream
- Commits approved trees to the source tree and rebuilds the baseline
- Stops when a baseline offers no unprocessed candidate fix
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from null_annotator.config.schema import AnnotatorConfig
from null_annotator.core.bank import Bank
from null_annotator.core.checker_output import CheckerOutput, CheckerOutputParser
from null_annotator.core.downstream import DownstreamImpactCache
from null_annotator.core.explorer import FixTreeExplorer
from null_annotator.core.registries.field import FieldRegistry
from null_annotator.core.registries.region import CompoundRegionRegistry
from null_annotator.core.report import Report, Tag
from null_annotator.core.usage_index import UsageIndex
from null_annotator.injector.workspace import SourceWorkspace
from null_annotator.injector.worklist import WorkItem, dump_work_list, work_items
from null_annotator.models.fix import Action, Fix
from null_annotator.utils.errors import RebuildFailure
from null_annotator.utils.logging import LogEventNames, bind_context, unbind_context
from null_annotator.utils.retry import create_retry

if TYPE_CHECKING:
    from null_annotator.interfaces.downstream import DownstreamChecker
    from null_annotator.interfaces.generated_code import GeneratedCodeHandler
    from null_annotator.interfaces.rebuild import RebuildTrigger

log = structlog.get_logger()


@dataclass
class AnnotationResult:
    """Summary of one annotator run."""

    iterations: int = 0
    approved: list[Report] = field(default_factory=list)
    rejected: list[Report] = field(default_factory=list)
    work_list: list[WorkItem] = field(default_factory=list)

    @property
    def approved_fixes(self) -> list[Fix]:
        fixes: dict[Fix, None] = {}
        for report in self.approved:
            fixes.update(dict.fromkeys(sorted(report.tree, key=str)))
        return list(fixes)


class Annotator:
    """Main orchestrator of the annotation engine.

    Example:
        annotator = create_annotator(config)
        result = await annotator.run()
    """

    def __init__(
        self,
        config: AnnotatorConfig,
        trigger: RebuildTrigger,
        usage: UsageIndex,
        downstream_checker: DownstreamChecker | None = None,
        handlers: Sequence[GeneratedCodeHandler] = (),
    ) -> None:
        """Initialize the Annotator.

        Args:
            config: Application configuration
            trigger: Rebuild trigger running the checker on the target
            usage: Usage data of the target module
            downstream_checker: Checker for dependent modules, if downstream analysis is on
            handlers: Generated-code handlers extending regions and fixes
        """
        self._config = config
        self._trigger = trigger
        self._usage = usage

        source_root = config.target.source_root
        self._field_registry = FieldRegistry(source_root)
        self._registry = CompoundRegionRegistry(usage, handlers)
        self._parser = CheckerOutputParser(self._field_registry)
        self._bank = Bank()
        self._workspace = SourceWorkspace(source_root)

        self._downstream: DownstreamImpactCache | None = None
        if config.downstream.enabled and downstream_checker is not None:
            self._downstream = DownstreamImpactCache(downstream_checker, usage, self._field_registry)

        self._rebuild = create_retry(
            max_attempts=config.retry.max_attempts,
            min_wait=config.retry.initial_delay,
            max_wait=config.retry.max_delay,
        )(self._rebuild_once)

        self._explorer = FixTreeExplorer(
            config.search,
            self._bank,
            self._registry,
            self._workspace,
            self._verify,
            self._downstream,
        )

    @property
    def bank(self) -> Bank:
        return self._bank

    async def _rebuild_once(self, work_list: Sequence[str], suggest_fixes: bool) -> None:
        log.info(LogEventNames.REBUILD_START, classes=len(work_list))
        if not await self._trigger.rebuild(work_list, suggest_fixes):
            log.warning(LogEventNames.REBUILD_FAILED, classes=len(work_list))
            raise RebuildFailure("Rebuild reported failure")
        log.info(LogEventNames.REBUILD_COMPLETE)

    async def _verify(self, work_list: Sequence[str]) -> CheckerOutput:
        await self._rebuild(work_list, True)
        output = self._config.target.checker_output
        if not output.exists():
            log.warning(LogEventNames.REBUILD_FAILED, classes=len(work_list), output=str(output))
            raise RebuildFailure(f"Rebuild succeeded but wrote no checker output: {output}")
        return self._parser.read(output)

    async def _build_baseline(self) -> None:
        output = await self._verify(sorted(self._usage.classes))
        self._bank.save_state(output, baseline=True)

    def _candidates(self, processed: set[Fix]) -> list[Fix]:
        nullable = self._config.annotations.nullable
        fixes = [
            fix
            for fix in self._bank.baseline_fixes()
            if fix.action == Action.ADD and fix.annotation == nullable and fix not in processed
        ]
        return sorted(fixes, key=str)

    def tag(self, report: Report) -> Tag:
        """Tag a report; a destructive tree is rejected whatever its effect."""
        if self._downstream is not None and report.contains_destructive_change(self._downstream):
            report.tag = Tag.REJECT
            log.info(LogEventNames.DESTRUCTIVE_TREE_VETOED, root=str(report.root))
        elif report.overall_effect(self._config.search.mode) < 0:
            report.tag = Tag.APPROVE
        else:
            report.tag = Tag.REJECT
        log.debug(
            LogEventNames.REPORT_TAGGED,
            root=str(report.root),
            tag=report.tag,
            effect=report.overall_effect(self._config.search.mode),
            tree=len(report.tree),
        )
        return report.tag

    async def run(self) -> AnnotationResult:
        """Run the engine until no new candidate fix appears.

        Returns:
            Approved and rejected reports and the approved work list

        Raises:
            RebuildFailure: If a rebuild fails after the configured retries
            IndexStateError: If checker rounds were ingested out of order
        """
        log.info(
            LogEventNames.ANNOTATOR_STARTING,
            depth=self._config.search.depth,
            mode=self._config.search.mode,
            bailout=self._config.search.bailout,
            downstream=self._downstream is not None,
        )
        result = AnnotationResult()
        processed: set[Fix] = set()

        await self._build_baseline()
        while True:
            candidates = self._candidates(processed)
            if not candidates:
                break
            result.iterations += 1
            bind_context(iteration=result.iterations)
            try:
                log.info(LogEventNames.OUTER_ITERATION, candidates=len(candidates))
                processed.update(candidates)
                if self._downstream is not None:
                    await self._downstream.populate(candidates)

                reports = await self._explorer.explore(candidates)
                approved = [r for r in reports if self.tag(r) == Tag.APPROVE]
                result.rejected.extend(r for r in reports if not r.approved)
                if not approved:
                    continue

                fixes: set[Fix] = set()
                for report in approved:
                    fixes |= report.tree
                processed |= fixes
                result.approved.extend(approved)
                self._workspace.commit(fixes)
                await self._build_baseline()
            finally:
                unbind_context("iteration")

        result.work_list = work_items(result.approved_fixes)
        dump_work_list(result.work_list, self._config.output.path)
        log.info(
            LogEventNames.ANNOTATOR_FINISHED,
            iterations=result.iterations,
            approved=len(result.approved),
            rejected=len(result.rejected),
            work_items=len(result.work_list),
        )
        return result


def create_annotator(
    config: AnnotatorConfig,
    handlers: Sequence[GeneratedCodeHandler] | None = None,
) -> Annotator:
    """Create an Annotator with command-backed collaborators.

    Args:
        config: Application configuration
        handlers: Generated-code handlers; defaults to the Lombok handler

    Returns:
        Configured Annotator instance
    """
    from null_annotator.adapters.downstream import CommandDownstreamChecker
    from null_annotator.adapters.lombok import LombokHandler
    from null_annotator.adapters.rebuild import CommandRebuildTrigger

    usage = UsageIndex.load(config.target.scanner_output)
    if handlers is None:
        handlers = [LombokHandler(usage)]
    downstream = None
    if config.downstream.enabled:
        downstream = CommandDownstreamChecker(config.downstream, config.target.source_root)
    return Annotator(
        config,
        CommandRebuildTrigger(config.build, config.target),
        usage,
        downstream,
        handlers,
    )
