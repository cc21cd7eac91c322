"""Abstract interface for checking dependent modules."""

from collections.abc import Iterable
from typing import Protocol

from ..models.fix import Fix
from ..models.region import Error


class DownstreamChecker(Protocol):
    """Runs the checker on downstream consumers of the target module."""

    async def check(self, fixes: Iterable[Fix]) -> frozenset[Error]:
        """
        Check the downstream modules against the target with ``fixes`` applied.

        An empty iterable yields the baseline error set.

        Args:
            fixes: Fixes assumed to be applied to the target's public API

        Returns:
            Errors reported in downstream modules

        Raises:
            RebuildFailure: If the downstream build could not be run
        """
        ...
