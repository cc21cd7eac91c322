"""Abstract interface for code-generator aware extensions."""

from collections.abc import Set
from typing import Protocol

from ..models.fix import Fix
from ..models.region import Region


class GeneratedCodeHandler(Protocol):
    """Accounts for members a code generator derives from source declarations.

    Both operations are additive: results are unioned into the caller's set,
    never substituted for it.
    """

    def extend_impacted_regions(self, regions: Set[Region]) -> frozenset[Region]:
        """
        Return extra regions impacted through generated members.

        Args:
            regions: Regions already known to be impacted

        Returns:
            Additional regions (may overlap the input)
        """
        ...

    def extend_fixes(self, fixes: Set[Fix]) -> frozenset[Fix]:
        """
        Return fixes a generator would copy to derived locations.

        Args:
            fixes: Fixes of a fix tree

        Returns:
            Additional fixes, each marked ``generated``
        """
        ...
