"""Region registries: which regions a location's edit can affect.

Impact rules differ per location kind:

- field: every region reading or writing the field, plus the declaring
  class-level region (initializers)
- method return: the method and every caller
- parameter: the declaring method and every call site
- local variable: the enclosing method only
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from null_annotator.core.usage_index import UsageIndex
from null_annotator.interfaces.generated_code import GeneratedCodeHandler
from null_annotator.models.fix import Fix
from null_annotator.models.location import Location, LocationKind
from null_annotator.models.region import Region


class RegionRegistry(Protocol):
    """Maps a location to impacted and using regions."""

    def impacted_regions(self, location: Location) -> frozenset[Region]:
        """Regions to re-check if an edit on ``location`` is applied."""
        ...

    def impacted_regions_by_use(self, location: Location) -> frozenset[Region]:
        """Regions that reference ``location``."""
        ...


class FieldRegionRegistry:
    def __init__(self, usage: UsageIndex) -> None:
        self._usage = usage

    def impacted_regions_by_use(self, location: Location) -> frozenset[Region]:
        regions: set[Region] = set()
        for name in location.variables:
            regions |= self._usage.users_of_field(location.clazz, name)
        return frozenset(regions)

    def impacted_regions(self, location: Location) -> frozenset[Region]:
        return self.impacted_regions_by_use(location) | {
            Region(location.clazz, Region.CLASS_LEVEL)
        }


class MethodRegionRegistry:
    """Method returns and local variables."""

    def __init__(self, usage: UsageIndex) -> None:
        self._usage = usage

    def impacted_regions_by_use(self, location: Location) -> frozenset[Region]:
        if location.kind == LocationKind.LOCAL_VARIABLE:
            return frozenset()
        return self._usage.callers_of(location.clazz, location.member)

    def impacted_regions(self, location: Location) -> frozenset[Region]:
        return self.impacted_regions_by_use(location) | {Region(location.clazz, location.member)}


class ParameterRegionRegistry:
    def __init__(self, usage: UsageIndex) -> None:
        self._usage = usage

    def impacted_regions_by_use(self, location: Location) -> frozenset[Region]:
        return self._usage.callers_of(location.clazz, location.member)

    def impacted_regions(self, location: Location) -> frozenset[Region]:
        return self.impacted_regions_by_use(location) | {Region(location.clazz, location.member)}


class CompoundRegionRegistry:
    """Dispatches by location kind, then unions generated-code extensions."""

    def __init__(
        self,
        usage: UsageIndex,
        handlers: Sequence[GeneratedCodeHandler] = (),
        registries: Mapping[LocationKind, RegionRegistry] | None = None,
    ) -> None:
        if registries is None:
            method = MethodRegionRegistry(usage)
            registries = {
                LocationKind.FIELD: FieldRegionRegistry(usage),
                LocationKind.METHOD_RETURN: method,
                LocationKind.LOCAL_VARIABLE: method,
                LocationKind.PARAMETER: ParameterRegionRegistry(usage),
            }
        self._registries = dict(registries)
        self._handlers = list(handlers)

    @property
    def handlers(self) -> list[GeneratedCodeHandler]:
        return list(self._handlers)

    def impacted_regions(self, location: Location) -> frozenset[Region]:
        base = self._registries[location.kind].impacted_regions(location)
        extended = set(base)
        for handler in self._handlers:
            extended |= handler.extend_impacted_regions(base)
        return frozenset(extended)

    def impacted_regions_by_use(self, location: Location) -> frozenset[Region]:
        return self._registries[location.kind].impacted_regions_by_use(location)

    def impacted_regions_of(self, fixes: Iterable[Fix]) -> frozenset[Region]:
        """Union of the impacted regions of every fix."""
        regions: set[Region] = set()
        for fix in fixes:
            regions |= self.impacted_regions(fix.location)
        return frozenset(regions)

    def extend_fixes(self, fixes: Iterable[Fix]) -> frozenset[Fix]:
        """Return ``fixes`` plus every fix a code generator would copy from them."""
        base = frozenset(fixes)
        extended = set(base)
        for handler in self._handlers:
            extended |= handler.extend_fixes(base)
        return frozenset(extended)
