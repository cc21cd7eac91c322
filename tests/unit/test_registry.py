"""Tests for the usage index and region registries."""

from __future__ import annotations

from collections.abc import Set
from pathlib import Path

from conftest import MAIN, field_fix, jsonl, method_fix, region

from null_annotator.adapters.lombok import LombokHandler, getter_names
from null_annotator.core.registries.region import CompoundRegionRegistry
from null_annotator.core.usage_index import UsageIndex
from null_annotator.models.fix import Fix
from null_annotator.models.location import Location
from null_annotator.models.region import Region


def usage() -> UsageIndex:
    return UsageIndex.from_lines(
        jsonl(
            [
                {"record": "method", "clazz": MAIN, "member": "run(int)", "path": "Main.java"},
                {"record": "method", "clazz": MAIN, "member": "getF()", "path": "Main.java",
                 "generated": True},
                {"record": "field_use", "region": region("m1()"), "clazz": MAIN, "field": "f"},
                {"record": "field_use", "region": region("getF()"), "clazz": MAIN, "field": "f"},
                {"record": "call", "region": region("caller()", "test.Other"), "clazz": MAIN,
                 "member": "run(int)"},
                {"record": "call", "region": region("user()", "test.Other"), "clazz": MAIN,
                 "member": "getF()"},
            ]
        )
    )


class RecordingHandler:
    """Generated-code handler adding fixed results."""

    def __init__(self, regions: Set[Region] = frozenset(), fixes: Set[Fix] = frozenset()) -> None:
        self.regions = frozenset(regions)
        self.fixes = frozenset(fixes)
        self.seen: list[frozenset[Region]] = []

    def extend_impacted_regions(self, regions: Set[Region]) -> frozenset[Region]:
        self.seen.append(frozenset(regions))
        return self.regions

    def extend_fixes(self, fixes: Set[Fix]) -> frozenset[Fix]:
        return self.fixes


class TestUsageIndex:
    """Test scanner record ingestion."""

    def test_skips_malformed_records(self) -> None:
        """Malformed scanner lines are skipped."""
        index = UsageIndex.from_lines(["{", '{"record": "call"}', ""])
        assert index.classes == frozenset()

    def test_load_skips_undecodable_lines(self, tmp_path: Path) -> None:
        """Invalid UTF-8 in the scanner output costs only that line."""
        path = tmp_path / "scanner.jsonl"
        method = jsonl(
            [{"record": "method", "clazz": MAIN, "member": "run(int)", "path": "Main.java"}]
        )[0]
        path.write_bytes(b'{"record": "method", "clazz": "\xc3("}\n' + method.encode() + b"\n")

        index = UsageIndex.load(path)

        assert index.classes == {MAIN}

    def test_lookups(self) -> None:
        """Field users, callers and methods are indexed."""
        index = usage()
        assert index.users_of_field(MAIN, "f") == {Region(MAIN, "m1()"), Region(MAIN, "getF()")}
        assert index.callers_of(MAIN, "run(int)") == {Region("test.Other", "caller()")}
        assert index.is_generated(MAIN, "getF()")
        assert not index.is_generated(MAIN, "run(int)")
        assert index.classes == {MAIN}


class TestCompoundRegionRegistry:
    """Test per-kind impact rules and handler extension."""

    def test_field_impacts_users_and_class_level(self) -> None:
        """A field edit impacts every region using the field."""
        registry = CompoundRegionRegistry(usage())
        location = field_fix("f").location
        assert registry.impacted_regions(location) == {
            Region(MAIN, "m1()"),
            Region(MAIN, "getF()"),
            Region(MAIN, Region.CLASS_LEVEL),
        }
        assert Region(MAIN, Region.CLASS_LEVEL) not in registry.impacted_regions_by_use(location)

    def test_method_impacts_itself_and_callers(self) -> None:
        """A return edit impacts the method and its callers."""
        registry = CompoundRegionRegistry(usage())
        location = Location.on_method("Main.java", MAIN, "run(int)")
        assert registry.impacted_regions(location) == {
            Region(MAIN, "run(int)"),
            Region("test.Other", "caller()"),
        }

    def test_parameter_impacts_method_and_call_sites(self) -> None:
        """A parameter edit impacts the declaring method and every call site."""
        registry = CompoundRegionRegistry(usage())
        location = Location.on_parameter("Main.java", MAIN, "run(int)", 0)
        assert registry.impacted_regions(location) == {
            Region(MAIN, "run(int)"),
            Region("test.Other", "caller()"),
        }
        assert registry.impacted_regions_by_use(location) == {Region("test.Other", "caller()")}

    def test_local_variable_impacts_enclosing_method_only(self) -> None:
        """A local variable edit impacts only its method."""
        registry = CompoundRegionRegistry(usage())
        location = Location.on_local_variable("Main.java", MAIN, "run(int)", "x")
        assert registry.impacted_regions(location) == {Region(MAIN, "run(int)")}
        assert registry.impacted_regions_by_use(location) == frozenset()

    def test_handlers_extend_never_replace(self) -> None:
        """Handler regions and fixes are unioned with the base result."""
        extra = Region("test.Generated", "m()")
        copied = method_fix("getF()")
        first = RecordingHandler(regions={extra})
        second = RecordingHandler(fixes={copied})
        registry = CompoundRegionRegistry(usage(), [first, second])
        location = Location.on_method("Main.java", MAIN, "run(int)")

        regions = registry.impacted_regions(location)
        assert extra in regions
        assert Region(MAIN, "run(int)") in regions
        # Every handler sees the base regions.
        assert first.seen == second.seen == [frozenset(regions - {extra})]
        assert registry.extend_fixes({field_fix("f")}) == {field_fix("f"), copied}

    def test_impacted_regions_of_tree(self) -> None:
        """The regions of a tree are the union over its fixes."""
        registry = CompoundRegionRegistry(usage())
        tree = {field_fix("f"), Fix(Location.on_method("Main.java", MAIN, "run(int)"), "a.B")}
        regions = registry.impacted_regions_of(tree)
        assert Region(MAIN, "m1()") in regions
        assert Region("test.Other", "caller()") in regions


class TestLombokHandler:
    """Test the generated getter handling."""

    def test_getter_names(self) -> None:
        """Both getter spellings are considered."""
        assert getter_names("value") == ("getValue()", "isValue()")

    def test_extends_regions_with_getter_callers(self) -> None:
        """Callers of a generated getter are impacted with it."""
        handler = LombokHandler(usage())
        regions = handler.extend_impacted_regions({Region(MAIN, "getF()"), Region(MAIN, "m1()")})
        assert regions == {Region("test.Other", "user()")}

    def test_copies_field_fix_to_generated_getter(self) -> None:
        """An added field annotation is copied to the generated getter's return."""
        handler = LombokHandler(usage())
        (copy,) = handler.extend_fixes({field_fix("f")})
        assert copy == method_fix("getF()")
        assert copy.generated

    def test_ignores_fields_without_generated_getter(self) -> None:
        """No copy without a generated getter."""
        handler = LombokHandler(usage())
        assert handler.extend_fixes({field_fix("g")}) == frozenset()
