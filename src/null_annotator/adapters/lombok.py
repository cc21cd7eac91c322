"""Generated-code handler for Lombok accessors."""

from __future__ import annotations

from collections.abc import Set

from null_annotator.core.usage_index import UsageIndex
from null_annotator.models.fix import Action, Fix
from null_annotator.models.location import Location, LocationKind
from null_annotator.models.region import Region


def getter_names(field: str) -> tuple[str, str]:
    """Signatures Lombok may generate for reading ``field``."""
    capitalized = field[:1].upper() + field[1:]
    return f"get{capitalized}()", f"is{capitalized}()"


class LombokHandler:
    """Accounts for getters Lombok generates from fields.

    Callers of a generated getter are impacted whenever the getter is, and an
    annotation added to a field is copied by Lombok onto its getter's return.
    """

    def __init__(self, usage: UsageIndex) -> None:
        self._usage = usage

    def extend_impacted_regions(self, regions: Set[Region]) -> frozenset[Region]:
        extended: set[Region] = set()
        for region in regions:
            if self._usage.is_generated(region.clazz, region.member):
                extended |= self._usage.callers_of(region.clazz, region.member)
        return frozenset(extended)

    def extend_fixes(self, fixes: Set[Fix]) -> frozenset[Fix]:
        copies: set[Fix] = set()
        for fix in fixes:
            location = fix.location
            if location.kind != LocationKind.FIELD or fix.action != Action.ADD:
                continue
            for name in location.variables:
                for getter in getter_names(name):
                    if self._usage.is_generated(location.clazz, getter):
                        target = Location.on_method(location.path, location.clazz, getter)
                        copies.add(fix.copy_to(target))
        return frozenset(copies)
