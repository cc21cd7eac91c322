"""Abstract interface for triggering a rebuild of the target module."""

from collections.abc import Sequence
from typing import Protocol


class RebuildTrigger(Protocol):
    """Runs the build with the nullability checker attached.

    The call blocks (from the engine's point of view) until the checker has
    written its output for the round.
    """

    async def rebuild(self, work_list: Sequence[str], suggest_fixes: bool) -> bool:
        """
        Rebuild the target and run the checker.

        Args:
            work_list: Flat names of the classes to re-check
            suggest_fixes: Whether the checker should emit candidate fixes

        Returns:
            True if the build and checker run succeeded, False otherwise
        """
        ...
