"""Batch scheduling of reports into independent verification groups."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from null_annotator.core.registries.region import CompoundRegionRegistry
from null_annotator.core.report import Report
from null_annotator.models.region import Region


@dataclass
class Node:
    """Arena slot of one report."""

    index: int
    report: Report
    regions: frozenset[Region]
    neighbors: set[int] = field(default_factory=set)
    group: int = -1


class ConflictGraph:
    """Undirected graph over reports, edges join reports with overlapping regions.

    Nodes live in an arena and refer to each other by index.
    """

    def __init__(self) -> None:
        self.nodes: list[Node] = []

    def add(self, report: Report, regions: frozenset[Region]) -> Node:
        node = Node(index=len(self.nodes), report=report, regions=regions)
        for other in self.nodes:
            if not other.regions.isdisjoint(regions):
                other.neighbors.add(node.index)
                node.neighbors.add(other.index)
        self.nodes.append(node)
        return node

    def conflicts(self, a: int, b: int) -> bool:
        return b in self.nodes[a].neighbors

    def find_groups(self) -> list[list[Node]]:
        """Greedily group pairwise non-conflicting nodes in insertion order.

        Each node joins the first group holding none of its neighbors; this is
        not an optimal coloring.
        """
        groups: list[list[Node]] = []
        for node in self.nodes:
            for number, group in enumerate(groups):
                if all(member.index not in node.neighbors for member in group):
                    group.append(node)
                    node.group = number
                    break
            else:
                node.group = len(groups)
                groups.append([node])
        return groups


class BatchScheduler:
    """Groups reports so that each group can be verified with one rebuild."""

    def __init__(self, registry: CompoundRegionRegistry) -> None:
        self._registry = registry

    def schedule(self, reports: Sequence[Report]) -> list[list[Report]]:
        graph = ConflictGraph()
        for report in reports:
            graph.add(report, self._registry.impacted_regions_of(report.tree))
        return [[node.report for node in group] for group in graph.find_groups()]
