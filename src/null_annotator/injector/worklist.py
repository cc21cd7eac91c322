"""Injection work lists: ordered (path, location, change) items as JSON."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, TypeAdapter

from null_annotator.injector.changes import AnnotationChange
from null_annotator.models.fix import Action, Fix
from null_annotator.models.records import LocationRecord


class WorkItem(BaseModel):
    """One edit the injector should perform."""

    model_config = ConfigDict(frozen=True)

    path: str
    location: LocationRecord
    annotation: str
    action: Action = Action.ADD
    type_index: list[list[int]] = [[0]]

    @classmethod
    def from_fix(cls, fix: Fix) -> WorkItem:
        return cls(
            path=fix.location.path,
            location=LocationRecord.from_location(fix.location),
            annotation=fix.annotation,
            action=fix.action,
            type_index=[list(path) for path in fix.type_index],
        )

    def to_fix(self) -> Fix:
        return Fix(
            location=self.location.to_location(),
            annotation=self.annotation,
            action=self.action,
            type_index=tuple(tuple(path) for path in self.type_index) or ((0,),),
        )

    def to_change(self) -> AnnotationChange:
        return AnnotationChange.from_fix(self.to_fix())


_WORK_LIST_ADAPTER = TypeAdapter(list[WorkItem])


def work_items(fixes: Iterable[Fix]) -> list[WorkItem]:
    """Build a work list, skipping fixes a code generator derives."""
    return [WorkItem.from_fix(fix) for fix in fixes if not fix.generated]


def dump_work_list(items: Sequence[WorkItem], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(_WORK_LIST_ADAPTER.dump_json(list(items), indent=2))


def load_work_list(path: Path) -> list[WorkItem]:
    """Read a work list.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        pydantic.ValidationError: If the file is not a valid work list
    """
    return _WORK_LIST_ADAPTER.validate_json(path.read_bytes())
