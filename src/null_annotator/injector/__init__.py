"""Source text injection of annotation changes."""

from .changes import AddAnnotation, AnnotationChange, Name, RemoveAnnotation
from .injector import InjectionResult, Injector
from .locator import JavaSourceLocator
from .modification import Modification, MultiPositionModification, OverlappingModificationError
from .workspace import SourceWorkspace
from .worklist import WorkItem, dump_work_list, load_work_list, work_items

__all__ = [
    # Changes
    "Name",
    "AnnotationChange",
    "AddAnnotation",
    "RemoveAnnotation",
    # Text modifications
    "Modification",
    "MultiPositionModification",
    "OverlappingModificationError",
    # Locating and applying
    "JavaSourceLocator",
    "Injector",
    "InjectionResult",
    "SourceWorkspace",
    # Work lists
    "WorkItem",
    "work_items",
    "dump_work_list",
    "load_work_list",
]
