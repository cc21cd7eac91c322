"""Locate Java declarations in source text using tree-sitter.

Classes are addressed by flat name (``pkg.Outer$Inner``). Each ``$``
separated key after the top-level name selects:

- ``Inner``: a directly nested type declaration
- ``1``: the first anonymous class or enum constant
- ``1Local``: the first local class named ``Local``

Offsets returned by this module are byte offsets into the UTF-8 source.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator

import tree_sitter_java
from tree_sitter import Language, Node, Parser

from null_annotator.models.field_record import ClassFieldRecord, FieldDeclarationRecord
from null_annotator.models.location import Location, LocationKind
from null_annotator.utils.errors import TargetNotFoundError

JAVA_LANGUAGE = Language(tree_sitter_java.language())

TYPE_DECLARATIONS = frozenset(
    {
        "class_declaration",
        "interface_declaration",
        "enum_declaration",
        "record_declaration",
        "annotation_type_declaration",
    }
)
FIELD_DECLARATIONS = frozenset({"field_declaration", "constant_declaration"})
PRIMITIVE_TYPES = frozenset({"integral_type", "floating_point_type", "boolean_type"})
ANNOTATIONS = frozenset({"marker_annotation", "annotation"})

_ANNOTATION_RE = re.compile(r"@[\w.]+(\s*\([^)]*\))?")


def _is_anonymous_class(node: Node) -> bool:
    return node.type == "object_creation_expression" and any(
        child.type == "class_body" for child in node.children
    )


def _is_scope(node: Node) -> bool:
    return node.type in TYPE_DECLARATIONS or _is_anonymous_class(node) or node.type == "enum_constant"


def _walk(node: Node, predicate: Callable[[Node], bool]) -> Iterator[Node]:
    """Yield matching descendants in document order without entering nested scopes."""
    for child in node.children:
        if predicate(child):
            yield child
        if not _is_scope(child):
            yield from _walk(child, predicate)


def _strip_generics(text: str) -> str:
    out: list[str] = []
    depth = 0
    for char in text:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        elif depth == 0:
            out.append(char)
    return "".join(out)


def erase_type(text: str) -> str:
    """Reduce a type to its erased simple name, e.g. ``java.util.List<T>...`` to ``List[]``."""
    text = _ANNOTATION_RE.sub("", text)
    text = re.sub(r"\s+", "", _strip_generics(text)).replace("...", "[]")
    return text.rsplit(".", 1)[-1]


def signature_parameters(member: str) -> list[str]:
    """Split the parameter list of a member signature into erased simple type names."""
    start, end = member.find("("), member.rfind(")")
    if start < 0 or end < start:
        return []
    inner = member[start + 1 : end]
    params: list[str] = []
    depth = 0
    current: list[str] = []
    for char in inner:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        if char == "," and depth == 0:
            params.append("".join(current))
            current = []
        else:
            current.append(char)
    if inner.strip():
        params.append("".join(current))
    return [erase_type(param) for param in params]


def node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8")


def modifiers_of(node: Node) -> Node | None:
    for child in node.children:
        if child.type == "modifiers":
            return child
    return None


def declared_type_of(node: Node) -> Node | None:
    """Return the declared type node of a field, method, parameter or local variable."""
    declared = node.child_by_field_name("type")
    if declared is not None:
        return declared
    # spread_parameter carries its type as an unnamed child.
    for child in node.named_children:
        if child.type not in ("modifiers", "variable_declarator") and child.type not in ANNOTATIONS:
            return child
    return None


class JavaSourceLocator:
    """Finds declarations addressed by a :class:`Location` in one Java file."""

    def __init__(self, source: bytes, path: str = "<memory>") -> None:
        self.source = source
        self.path = path
        self._tree = Parser(JAVA_LANGUAGE).parse(source)

    @property
    def root(self) -> Node:
        return self._tree.root_node

    @property
    def package(self) -> str:
        for child in self.root.named_children:
            if child.type == "package_declaration":
                for part in child.named_children:
                    if part.type in ("identifier", "scoped_identifier"):
                        return node_text(part)
        return ""

    def package_declaration(self) -> Node | None:
        for child in self.root.named_children:
            if child.type == "package_declaration":
                return child
        return None

    def import_declarations(self) -> list[Node]:
        return [child for child in self.root.named_children if child.type == "import_declaration"]

    def _not_found(self, target: str) -> TargetNotFoundError:
        return TargetNotFoundError(self.path, target)

    def find_class(self, flat_name: str) -> Node:
        """Find a type declaration, anonymous class or enum constant by flat name.

        Raises:
            TargetNotFoundError: If no such class exists in this file.
        """
        package = self.package
        if package:
            if not flat_name.startswith(package + "."):
                raise self._not_found(flat_name)
            flat_name = flat_name[len(package) + 1 :]
        keys = flat_name.split("$")
        cursor = next(
            (
                child
                for child in self.root.named_children
                if child.type in TYPE_DECLARATIONS and self._name_of(child) == keys[0]
            ),
            None,
        )
        if cursor is None:
            raise self._not_found(flat_name)
        for key in keys[1:]:
            name = key.lstrip("0123456789")
            digits = key[: len(key) - len(name)]
            if not name:
                found = self._anonymous_class(cursor, int(digits) - 1)
            elif not digits:
                found = next(
                    (
                        member
                        for member in self._members(cursor)
                        if member.type in TYPE_DECLARATIONS and self._name_of(member) == name
                    ),
                    None,
                )
            else:
                local = list(
                    _walk(
                        cursor,
                        lambda n, name=name: n.type in TYPE_DECLARATIONS and self._name_of(n) == name,
                    )
                )
                index = int(digits) - 1
                found = local[index] if 0 <= index < len(local) else None
            if found is None:
                raise self._not_found(flat_name)
            cursor = found
        return cursor

    def _anonymous_class(self, cursor: Node, index: int) -> Node | None:
        if index < 0:
            return None
        if cursor.type == "enum_declaration":
            body = cursor.child_by_field_name("body")
            constants = [c for c in body.named_children if c.type == "enum_constant"] if body else []
            if index < len(constants):
                return constants[index]
            index -= len(constants)
        candidates = list(_walk(cursor, _is_anonymous_class))
        return candidates[index] if index < len(candidates) else None

    @staticmethod
    def _name_of(node: Node) -> str:
        name = node.child_by_field_name("name")
        return node_text(name) if name is not None else ""

    @staticmethod
    def _body_of(node: Node) -> Node | None:
        if _is_anonymous_class(node):
            return next(child for child in node.children if child.type == "class_body")
        return node.child_by_field_name("body")

    def _members(self, clazz: Node) -> Iterator[Node]:
        body = self._body_of(clazz)
        if body is None:
            return
        for child in body.named_children:
            if child.type == "enum_body_declarations":
                yield from child.named_children
            elif child.type != "enum_constant":
                yield child

    @staticmethod
    def declarator_names(declaration: Node) -> frozenset[str]:
        names = set()
        for declarator in declaration.children_by_field_name("declarator"):
            name = declarator.child_by_field_name("name")
            if name is not None:
                names.add(node_text(name))
        return frozenset(names)

    def find_field(self, clazz: str, variables: frozenset[str]) -> Node:
        """Find the field declaration statement declaring exactly ``variables``."""
        for member in self._members(self.find_class(clazz)):
            if member.type in FIELD_DECLARATIONS and self.declarator_names(member) == variables:
                return member
        raise self._not_found(f"{clazz}#{{{','.join(sorted(variables))}}}")

    def find_method(self, clazz: str, member: str) -> Node:
        """Find a method or constructor by signature, e.g. ``run(java.lang.String,int[])``."""
        cursor = self.find_class(clazz)
        method_name = member.split("(", 1)[0]
        wanted = signature_parameters(member)
        for node in self._members(cursor):
            if node.type not in ("method_declaration", "constructor_declaration"):
                continue
            if self._name_of(node) != method_name:
                continue
            if [erase_type(t) for t in self.parameter_types(node)] == wanted:
                return node
        raise self._not_found(f"{clazz}#{member}")

    @staticmethod
    def parameters(method: Node) -> list[Node]:
        params = method.child_by_field_name("parameters")
        if params is None:
            return []
        return [
            child
            for child in params.named_children
            if child.type in ("formal_parameter", "spread_parameter")
        ]

    def parameter_types(self, method: Node) -> list[str]:
        types = []
        for param in self.parameters(method):
            declared = declared_type_of(param)
            text = node_text(declared) if declared is not None else ""
            dimensions = param.child_by_field_name("dimensions")
            if dimensions is not None:
                text += node_text(dimensions)
            if param.type == "spread_parameter":
                text += "[]"
            types.append(text)
        return types

    def find_parameter(self, clazz: str, member: str, index: int) -> Node:
        params = self.parameters(self.find_method(clazz, member))
        if not 0 <= index < len(params):
            raise self._not_found(f"{clazz}#{member}@{index}")
        return params[index]

    def find_local_variable(self, clazz: str, member: str, name: str) -> Node:
        method = self.find_method(clazz, member)
        body = method.child_by_field_name("body")
        if body is not None:
            for declaration in _walk(body, lambda n: n.type == "local_variable_declaration"):
                if name in self.declarator_names(declaration):
                    return declaration
        raise self._not_found(f"{clazz}#{member}:{name}")

    def find(self, location: Location) -> Node:
        """Find the declaration node a location addresses.

        Raises:
            TargetNotFoundError: If the declaration cannot be located.
        """
        if location.kind == LocationKind.FIELD:
            return self.find_field(location.clazz, location.variables)
        if location.kind == LocationKind.METHOD_RETURN:
            return self.find_method(location.clazz, location.member)
        if location.kind == LocationKind.PARAMETER:
            return self.find_parameter(location.clazz, location.member, location.index)
        return self.find_local_variable(
            location.clazz, location.member, next(iter(location.variables))
        )

    def field_record(self, clazz: str) -> ClassFieldRecord:
        """Collect every field declaration statement of ``clazz``."""
        record = ClassFieldRecord(clazz=clazz, path=self.path)
        for member in self._members(self.find_class(clazz)):
            if member.type not in FIELD_DECLARATIONS:
                continue
            declared = declared_type_of(member)
            modifiers = modifiers_of(member)
            is_public = member.type == "constant_declaration" or (
                modifiers is not None and any(c.type == "public" for c in modifiers.children)
            )
            record.add(
                FieldDeclarationRecord(
                    names=self.declarator_names(member),
                    is_primitive=declared is not None and declared.type in PRIMITIVE_TYPES,
                    is_public=is_public,
                )
            )
        return record
