"""Tests for text modifications, annotation changes and the injector."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from conftest import MAIN, NULLABLE

from null_annotator.injector.changes import AddAnnotation, AnnotationChange, Name, RemoveAnnotation
from null_annotator.injector.injector import Injector
from null_annotator.injector.modification import (
    Modification,
    MultiPositionModification,
    OverlappingModificationError,
)
from null_annotator.models.fix import Action, Fix
from null_annotator.models.location import Location

INITIALIZER = "com.uber.nullaway.annotations.Initializer"

CONSTRUCTOR_SOURCE = """\
package test;
public class Main {
   public Main(String name) {}
   Object test() { return null; }
}
"""

GENERIC_SOURCE = """\
package test;

import java.util.HashMap;
import java.util.List;
import java.util.Map;

public class Main {
   Map<String, List<String>> m = new HashMap<String, List<String>>();
   Map<String, List<String>> d = new HashMap<>();
}
"""

ANNOTATED_SOURCE = """\
package test;

import javax.annotation.Nullable;

public class Main {
   @Nullable Object f;
   @Nullable public Object get() { return f; }
}
"""


def add(location: Location, annotation: str = NULLABLE, **kwargs: object) -> AnnotationChange:
    return AddAnnotation(location, Name.of(annotation), **kwargs)  # type: ignore[arg-type]


def remove(location: Location, annotation: str = NULLABLE) -> AnnotationChange:
    return RemoveAnnotation(location, Name.of(annotation))


class TestMultiPositionModification:
    """Test span bookkeeping and application."""

    def test_spans_apply_in_descending_order(self) -> None:
        """Spans added in any order equal applying them from the end."""
        source = b"0123456789"
        spans = [
            Modification.insert(2, "a"),
            Modification.delete(5, 7),
            Modification(8, 9, b"xyz"),
        ]
        expected = b"01a234" + b"7" + b"xyz" + b"9"
        for order in (spans, spans[::-1], [spans[1], spans[2], spans[0]]):
            assert MultiPositionModification(order).apply(source) == expected

    def test_iteration_is_descending(self) -> None:
        """Iteration yields spans from the end of the file."""
        patch = MultiPositionModification([Modification.insert(1, "a"), Modification.insert(5, "b")])
        assert [m.start for m in patch] == [5, 1]

    def test_identical_spans_collapse(self) -> None:
        """Adding the same span twice keeps one copy."""
        patch = MultiPositionModification([Modification.insert(3, "x")] * 2)
        assert len(patch) == 1

    @pytest.mark.parametrize(
        ("first", "second"),
        [
            (Modification.delete(2, 6), Modification.delete(4, 8)),
            (Modification.insert(3, "a"), Modification.insert(3, "b")),
            (Modification.delete(2, 6), Modification.insert(4, "a")),
        ],
    )
    def test_overlapping_spans_raise(self, first: Modification, second: Modification) -> None:
        """Different spans touching the same bytes are rejected."""
        patch = MultiPositionModification([first])
        with pytest.raises(OverlappingModificationError):
            patch.add(second)

    def test_adjacent_spans_do_not_overlap(self) -> None:
        """A deletion and an insertion at its end are independent."""
        patch = MultiPositionModification([Modification.delete(2, 4), Modification.insert(4, "z")])
        assert patch.apply(b"abcdef") == b"abzef"

    def test_empty_patch_is_identity(self) -> None:
        """No spans leave the source unchanged."""
        assert MultiPositionModification().apply(b"abc") == b"abc"

    def test_invalid_span(self) -> None:
        """Negative or reversed spans are rejected."""
        with pytest.raises(ValueError):
            Modification(5, 2)


class TestInjector:
    """Test end-to-end source rewriting."""

    def test_constructor_annotation_and_import(
        self, tmp_path: Path, write_source: Callable[[str, str], Path]
    ) -> None:
        """The import lands after the package line when there are no imports."""
        path = write_source("Main.java", CONSTRUCTOR_SOURCE)
        changes = [
            add(Location.on_method("Main.java", MAIN, "Main(java.lang.String)"), INITIALIZER),
            add(Location.on_method("Main.java", MAIN, "test()")),
        ]

        result = Injector(tmp_path).apply(changes)

        assert result.changed_files == {path}
        assert path.read_text() == (
            "package test;\n"
            "import com.uber.nullaway.annotations.Initializer;\n"
            "import javax.annotation.Nullable;\n"
            "public class Main {\n"
            "   @Initializer public Main(String name) {}\n"
            "   @Nullable Object test() { return null; }\n"
            "}\n"
        )

    def test_type_argument_is_mirrored_on_initializer(
        self, tmp_path: Path, write_source: Callable[[str, str], Path]
    ) -> None:
        """A nested type argument edit is mirrored on ``new T<...>()`` but not on a diamond."""
        path = write_source("Main.java", GENERIC_SOURCE)
        changes = [
            add(Location.on_field("Main.java", MAIN, ["m"]), type_index=((2, 1),)),
            add(Location.on_field("Main.java", MAIN, ["d"]), type_index=((2, 1),)),
        ]

        result = Injector(tmp_path).apply(changes)

        assert len(result.applied) == 2
        text = path.read_text()
        assert (
            "Map<String, List<@Nullable String>> m = new HashMap<String, List<@Nullable String>>();"
            in text
        )
        assert "Map<String, List<@Nullable String>> d = new HashMap<>();" in text
        assert "import java.util.Map;\nimport javax.annotation.Nullable;\n" in text

    def test_reapplying_is_idempotent(
        self, tmp_path: Path, write_source: Callable[[str, str], Path]
    ) -> None:
        """Existing annotations and imports are not duplicated."""
        path = write_source("Main.java", ANNOTATED_SOURCE)
        changes = [
            add(Location.on_field("Main.java", MAIN, ["f"])),
            add(Location.on_method("Main.java", MAIN, "get()")),
        ]

        result = Injector(tmp_path).apply(changes)

        assert result.changed_files == set()
        assert path.read_text() == ANNOTATED_SOURCE

    def test_remove_annotation(
        self, tmp_path: Path, write_source: Callable[[str, str], Path]
    ) -> None:
        """Removal deletes the annotation and its trailing space."""
        path = write_source("Main.java", ANNOTATED_SOURCE)
        Injector(tmp_path).apply(
            [
                remove(Location.on_field("Main.java", MAIN, ["f"])),
                remove(Location.on_method("Main.java", MAIN, "get()")),
            ]
        )
        text = path.read_text()
        assert "   Object f;\n" in text
        assert "   public Object get()" in text

    def test_missing_target_is_dropped(
        self, tmp_path: Path, write_source: Callable[[str, str], Path]
    ) -> None:
        """A change whose target is gone is dropped, the others still apply."""
        path = write_source("Main.java", CONSTRUCTOR_SOURCE)
        missing = add(Location.on_method("Main.java", MAIN, "gone()"))
        present = add(Location.on_method("Main.java", MAIN, "test()"))

        result = Injector(tmp_path).apply([missing, present])

        assert result.dropped == [missing]
        assert result.applied == [present]
        assert "@Nullable Object test()" in path.read_text()

    def test_missing_file_is_dropped(self, tmp_path: Path) -> None:
        """Changes to a file that does not exist are dropped."""
        change = add(Location.on_method("Gone.java", MAIN, "test()"))
        result = Injector(tmp_path).apply([change])
        assert result.dropped == [change]

    def test_conflicting_changes_drop_the_later_one(
        self, tmp_path: Path, write_source: Callable[[str, str], Path]
    ) -> None:
        """Two different insertions at one declaration start overlap."""
        path = write_source("Main.java", CONSTRUCTOR_SOURCE)
        location = Location.on_method("Main.java", MAIN, "test()")
        first = add(location)
        second = add(location, INITIALIZER)

        result = Injector(tmp_path).apply([first, second])

        assert result.applied == [first]
        assert result.dropped == [second]
        assert "Initializer" not in path.read_text()

    def test_import_without_package(
        self, tmp_path: Path, write_source: Callable[[str, str], Path]
    ) -> None:
        """Without package or imports the import opens the file."""
        path = write_source("Main.java", "class Main {\n   Object test() { return null; }\n}\n")
        Injector(tmp_path).apply([add(Location.on_method("Main.java", "Main", "test()"))])
        assert path.read_text() == (
            "import javax.annotation.Nullable;\n"
            "class Main {\n"
            "   @Nullable Object test() { return null; }\n"
            "}\n"
        )

    def test_no_import_for_same_package(
        self, tmp_path: Path, write_source: Callable[[str, str], Path]
    ) -> None:
        """Annotations of the file's own package are not imported."""
        path = write_source("Main.java", CONSTRUCTOR_SOURCE)
        Injector(tmp_path).apply([add(Location.on_method("Main.java", MAIN, "test()"), "test.Null")])
        assert "import" not in path.read_text()
        assert "@Null Object test()" in path.read_text()

    def test_empty_change_list(self, tmp_path: Path) -> None:
        """No changes touch no files."""
        result = Injector(tmp_path).apply([])
        assert result.applied == [] and result.changed_files == set()


class TestAnnotationChange:
    """Test change construction from fixes."""

    def test_from_fix_picks_action(self) -> None:
        """The fix action selects the change type."""
        location = Location.on_method("Main.java", MAIN, "test()")
        assert isinstance(AnnotationChange.from_fix(Fix(location, NULLABLE)), AddAnnotation)
        removal = Fix(location, NULLABLE, Action.REMOVE)
        assert isinstance(AnnotationChange.from_fix(removal), RemoveAnnotation)

    def test_base_change_cannot_be_built(self) -> None:
        """Only concrete add and remove changes can be constructed."""
        location = Location.on_method("Main.java", MAIN, "test()")
        with pytest.raises(TypeError):
            AnnotationChange(location, Name.of(NULLABLE))  # type: ignore[abstract]

    def test_name(self) -> None:
        """Names split into simple name and package."""
        name = Name.of(NULLABLE)
        assert (name.simple, name.package) == ("Nullable", "javax.annotation")
        assert Name.of("Nullable").package == ""
