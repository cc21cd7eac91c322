"""Core inference engine components.

This module exports the main engine classes:
- Annotator: Outer loop coordinating all components
- Bank: Versioned index of checker errors and candidate fixes
- FixTreeExplorer: Fix-tree search over candidate fixes
- Report: Exploration state of one candidate fix
- DownstreamImpactCache: Bounds on the effect on dependent modules
- BatchScheduler: Groups independent reports into one rebuild
"""

from null_annotator.core.annotator import AnnotationResult, Annotator, create_annotator
from null_annotator.core.bank import Bank, Diff
from null_annotator.core.checker_output import CheckerOutput, CheckerOutputParser
from null_annotator.core.downstream import DownstreamImpact, DownstreamImpactCache
from null_annotator.core.explorer import FixTreeExplorer
from null_annotator.core.report import Report, Tag
from null_annotator.core.scheduler import BatchScheduler, ConflictGraph
from null_annotator.core.usage_index import UsageIndex

__all__ = [
    "AnnotationResult",
    "Annotator",
    "Bank",
    "BatchScheduler",
    "CheckerOutput",
    "CheckerOutputParser",
    "ConflictGraph",
    "Diff",
    "DownstreamImpact",
    "DownstreamImpactCache",
    "FixTreeExplorer",
    "Report",
    "Tag",
    "UsageIndex",
    "create_annotator",
]
