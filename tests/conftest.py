"""Shared test fixtures for null-annotator."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from null_annotator.core.usage_index import UsageIndex
from null_annotator.models.fix import Fix
from null_annotator.models.location import Location

NULLABLE = "javax.annotation.Nullable"
MAIN = "test.Main"

MAIN_SOURCE = """\
package test;
public class Main {
   Object f;
   public void m1() {
       f = null;
   }
   public void m2() {
       f = null;
   }
   public Object getF() {
       return f;
   }
}
"""


def region(member: str, clazz: str = MAIN) -> dict[str, str]:
    return {"clazz": clazz, "member": member}


def error_record(kind: str, member: str, offset: int = 0, clazz: str = MAIN) -> dict[str, Any]:
    return {
        "record": "error",
        "kind": kind,
        "message": f"{kind} in {member}",
        "region": region(member, clazz),
        "offset": offset,
    }


def field_location(*names: str, path: str = "Main.java", clazz: str = MAIN) -> dict[str, Any]:
    return {"kind": "FIELD", "path": path, "clazz": clazz, "variables": list(names)}


def method_location(member: str, path: str = "Main.java", clazz: str = MAIN) -> dict[str, Any]:
    return {"kind": "METHOD_RETURN", "path": path, "clazz": clazz, "member": member}


def fix_record(
    location: dict[str, Any],
    error: dict[str, Any] | None = None,
    annotation: str = NULLABLE,
) -> dict[str, Any]:
    record: dict[str, Any] = {"record": "fix", "location": location, "annotation": annotation}
    if error is not None:
        record["reason"] = error["kind"]
        record["error"] = {
            "kind": error["kind"],
            "region": error["region"],
            "offset": error["offset"],
        }
    return record


def jsonl(records: Sequence[dict[str, Any]]) -> list[str]:
    return [json.dumps(record) for record in records]


def field_fix(*names: str) -> Fix:
    return Fix(Location.on_field("Main.java", MAIN, names), NULLABLE)


def method_fix(member: str) -> Fix:
    return Fix(Location.on_method("Main.java", MAIN, member), NULLABLE)


class ScriptedChecker:
    """Rebuild trigger writing checker records computed from the current source text.

    ``script`` receives the text of the watched file and returns the records
    the checker would report for it.
    """

    def __init__(
        self,
        source: Path,
        output: Path,
        script: Callable[[str], list[dict[str, Any]]],
        succeed: bool = True,
    ) -> None:
        self.source = source
        self.output = output
        self.script = script
        self.succeed = succeed
        self.calls: list[list[str]] = []
        self.seen_sources: list[str] = []

    async def rebuild(self, work_list: Sequence[str], suggest_fixes: bool) -> bool:
        self.calls.append(list(work_list))
        text = self.source.read_text()
        self.seen_sources.append(text)
        if not self.succeed:
            return False
        self.output.write_text("\n".join(jsonl(self.script(text))) + "\n")
        return True


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing a Java file below ``tmp_path``."""

    def write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    return write


@pytest.fixture
def main_java(write_source: Callable[[str, str], Path]) -> Path:
    """Write the shared ``test.Main`` class."""
    return write_source("Main.java", MAIN_SOURCE)


@pytest.fixture
def main_usage() -> UsageIndex:
    """Scanner data of ``test.Main``: two writers of ``f`` and one accessor."""
    return UsageIndex.from_lines(
        jsonl(
            [
                {"record": "method", "clazz": MAIN, "member": "m1()", "path": "Main.java",
                 "is_public": True, "returns_primitive": True},
                {"record": "method", "clazz": MAIN, "member": "m2()", "path": "Main.java",
                 "is_public": True, "returns_primitive": True},
                {"record": "method", "clazz": MAIN, "member": "getF()", "path": "Main.java",
                 "is_public": True},
                {"record": "field_use", "region": region("m1()"), "clazz": MAIN, "field": "f"},
                {"record": "field_use", "region": region("m2()"), "clazz": MAIN, "field": "f"},
                {"record": "field_use", "region": region("getF()"), "clazz": MAIN, "field": "f"},
            ]
        )
    )
