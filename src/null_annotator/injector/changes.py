"""Annotation changes and the text modifications they produce."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from tree_sitter import Node

from null_annotator.injector.locator import (
    ANNOTATIONS,
    JavaSourceLocator,
    declared_type_of,
    modifiers_of,
    node_text,
)
from null_annotator.injector.modification import Modification
from null_annotator.models.fix import TOP_LEVEL, Action, Fix
from null_annotator.models.location import Location
from null_annotator.utils.errors import TargetNotFoundError


@dataclass(frozen=True)
class Name:
    """Fully-qualified and simple name of an annotation type."""

    full: str
    simple: str

    @classmethod
    def of(cls, full: str) -> Name:
        return cls(full=full, simple=full.rsplit(".", 1)[-1])

    @property
    def package(self) -> str:
        return self.full.rsplit(".", 1)[0] if "." in self.full else ""

    def matches(self, annotation: Node) -> bool:
        """Check whether an annotation node refers to this name."""
        name = annotation.child_by_field_name("name")
        text = node_text(name) if name is not None else ""
        return text in (self.full, self.simple)


def _annotations_on(node: Node | None) -> list[Node]:
    if node is None:
        return []
    return [child for child in node.children if child.type in ANNOTATIONS]


def _unwrap_annotated(node: Node) -> tuple[Node, list[Node]]:
    """Split ``@A T`` into ``T`` and its annotations."""
    if node.type != "annotated_type":
        return node, []
    annotations = _annotations_on(node)
    inner = [child for child in node.named_children if child.type not in ANNOTATIONS]
    return inner[-1], annotations


def _type_arguments(node: Node) -> list[Node]:
    node, _ = _unwrap_annotated(node)
    if node.type != "generic_type":
        return []
    arguments = next((c for c in node.named_children if c.type == "type_arguments"), None)
    return list(arguments.named_children) if arguments is not None else []


def _initializer_types(declaration: Node) -> list[Node]:
    """Types of ``new T<...>(...)`` initializers of a field or local declaration."""
    types = []
    for declarator in declaration.children_by_field_name("declarator"):
        value = declarator.child_by_field_name("value")
        if value is not None and value.type == "object_creation_expression":
            created = value.child_by_field_name("type")
            if created is not None:
                types.append(created)
    return types


def import_modification(locator: JavaSourceLocator, names: Iterable[str]) -> Modification | None:
    """One insertion adding ``import`` statements after the last import or the package line."""
    statements = [f"import {name};" for name in sorted(set(names))]
    if not statements:
        return None
    imports = locator.import_declarations()
    anchor = imports[-1] if imports else locator.package_declaration()
    if anchor is None:
        return Modification.insert(0, "".join(s + "\n" for s in statements))
    return Modification.insert(anchor.end_byte, "".join("\n" + s for s in statements))


@dataclass(frozen=True)
class AnnotationChange(ABC):
    """Add or remove an annotation on the declaration a location addresses."""

    location: Location
    annotation: Name
    type_index: tuple[tuple[int, ...], ...] = TOP_LEVEL

    @classmethod
    def from_fix(cls, fix: Fix) -> AnnotationChange:
        change_type = AddAnnotation if fix.action == Action.ADD else RemoveAnnotation
        return change_type(fix.location, Name.of(fix.annotation), fix.type_index)

    @abstractmethod
    def compute(self, locator: JavaSourceLocator) -> list[Modification]:
        """Compute the spans of this change against ``locator``'s source.

        Raises:
            TargetNotFoundError: If the declaration or a type argument is missing.
        """

    def required_import(self, locator: JavaSourceLocator) -> str | None:
        """Fully-qualified name to import once this change is applied, if any."""
        return None

    def _type_argument(self, locator: JavaSourceLocator, declared: Node, path: tuple[int, ...]) -> Node:
        node = declared
        for index in path:
            arguments = _type_arguments(node)
            if not 1 <= index <= len(arguments):
                raise TargetNotFoundError(locator.path, f"{self.location} type argument {path}")
            node = arguments[index - 1]
        return node


class AddAnnotation(AnnotationChange):
    """Insert ``@Simple`` at the declaration or at the addressed type arguments."""

    def compute(self, locator: JavaSourceLocator) -> list[Modification]:
        declaration = locator.find(self.location)
        text = f"@{self.annotation.simple} "
        modifications = []
        if TOP_LEVEL[0] in self.type_index:
            present = _annotations_on(modifiers_of(declaration))
            declared = declared_type_of(declaration)
            if declared is not None:
                present += _unwrap_annotated(declared)[1]
            if not any(self.annotation.matches(a) for a in present):
                modifications.append(Modification.insert(declaration.start_byte, text))
        declared = declared_type_of(declaration)
        for path in self.type_index:
            if path == TOP_LEVEL[0] or declared is None:
                continue
            target = self._type_argument(locator, declared, path)
            if not any(self.annotation.matches(a) for a in _unwrap_annotated(target)[1]):
                modifications.append(Modification.insert(target.start_byte, text))
            for created in _initializer_types(declaration):
                # Diamonds and shorter argument lists are left alone.
                try:
                    mirrored = self._type_argument(locator, created, path)
                except TargetNotFoundError:
                    continue
                if not any(self.annotation.matches(a) for a in _unwrap_annotated(mirrored)[1]):
                    modifications.append(Modification.insert(mirrored.start_byte, text))
        return modifications

    def required_import(self, locator: JavaSourceLocator) -> str | None:
        package = self.annotation.package
        if not package or package == "java.lang" or package == locator.package:
            return None
        for declaration in locator.import_declarations():
            imported = node_text(declaration).removeprefix("import").removesuffix(";").strip()
            if imported in (self.annotation.full, f"{package}.*"):
                return None
        return self.annotation.full


class RemoveAnnotation(AnnotationChange):
    """Delete every ``@Simple`` occurrence this change addresses."""

    def compute(self, locator: JavaSourceLocator) -> list[Modification]:
        declaration = locator.find(self.location)
        candidates: list[Node] = []
        declared = declared_type_of(declaration)
        for path in self.type_index:
            if path == TOP_LEVEL[0]:
                candidates += _annotations_on(modifiers_of(declaration))
                if declared is not None:
                    candidates += _unwrap_annotated(declared)[1]
            elif declared is not None:
                candidates += _unwrap_annotated(self._type_argument(locator, declared, path))[1]
        modifications = []
        for annotation in candidates:
            if self.annotation.matches(annotation):
                end = annotation.end_byte
                while end < len(locator.source) and locator.source[end : end + 1] in (b" ", b"\t"):
                    end += 1
                modifications.append(Modification.delete(annotation.start_byte, end))
        return modifications
