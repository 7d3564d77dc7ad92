"""Lexical scope table for JavaScript/TypeScript syntax trees.

The table is built once per tree. Each scope owns the set of names declared
directly in it and a reference to its parent; lookups walk outward from the
innermost scope enclosing a node.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tree_sitter import Node

ScopeKind = Literal["program", "function", "class", "block", "catch"]

FUNCTION_NODE_TYPES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "generator_function_declaration",
        "arrow_function",
        "method_definition",
    }
)

_DECLARATION_FUNCTION_TYPES = frozenset(
    {"function_declaration", "generator_function_declaration"}
)

_CLASS_NODE_TYPES = frozenset({"class_declaration", "abstract_class_declaration", "class"})

_BLOCK_NODE_TYPES = frozenset(
    {"statement_block", "for_statement", "for_in_statement", "switch_body"}
)

_PATTERN_CONTAINER_TYPES = frozenset(
    {"object_pattern", "array_pattern", "rest_pattern", "formal_parameters"}
)


@dataclass(eq=False)
class Scope:
    """A single lexical scope and the names bound directly in it."""

    kind: ScopeKind
    parent: Scope | None = None
    names: set[str] = field(default_factory=set)

    def declare(self, name: str) -> None:
        self.names.add(name)

    def function_scope(self) -> Scope:
        """Nearest enclosing scope that receives hoisted ``var`` bindings."""
        scope: Scope = self
        while scope.kind not in ("function", "program") and scope.parent is not None:
            scope = scope.parent
        return scope

    def iter_chain(self) -> Iterator[Scope]:
        scope: Scope | None = self
        while scope is not None:
            yield scope
            scope = scope.parent

    def lookup(self, name: str) -> Scope | None:
        """Return the innermost scope declaring ``name``, or None if unbound."""
        for scope in self.iter_chain():
            if name in scope.names:
                return scope
        return None


@dataclass
class ScopeTable:
    """Mapping from scope-creating nodes to their scopes."""

    root: Scope
    by_node_id: dict[int, Scope] = field(default_factory=dict)

    def scope_for(self, node: Node) -> Scope:
        """Return the innermost scope enclosing ``node``."""
        current: Node | None = node
        while current is not None:
            scope = self.by_node_id.get(current.id)
            if scope is not None:
                return scope
            current = current.parent
        return self.root

    def is_bound(self, node: Node, name: str) -> bool:
        return self.scope_for(node).lookup(name) is not None


def _text(node: Node) -> str:
    return (node.text or b"").decode("utf8", errors="ignore")


def pattern_names(node: Node | None) -> list[str]:
    """Collect identifiers bound by a parameter list or destructuring pattern."""
    if node is None:
        return []

    node_type = node.type
    if node_type in ("identifier", "shorthand_property_identifier_pattern"):
        return [_text(node)]
    if node_type in ("assignment_pattern", "object_assignment_pattern"):
        return pattern_names(node.child_by_field_name("left"))
    if node_type == "pair_pattern":
        return pattern_names(node.child_by_field_name("value"))
    if node_type in ("required_parameter", "optional_parameter"):
        return pattern_names(node.child_by_field_name("pattern"))
    if node_type in _PATTERN_CONTAINER_TYPES:
        names: list[str] = []
        for child in node.named_children:
            names.extend(pattern_names(child))
        return names
    return []


def _import_names(node: Node) -> list[str]:
    names: list[str] = []
    for child in node.named_children:
        if child.type == "import_clause":
            for part in child.named_children:
                if part.type == "identifier":
                    names.append(_text(part))
                elif part.type == "namespace_import":
                    names.extend(
                        _text(ident)
                        for ident in part.named_children
                        if ident.type == "identifier"
                    )
                elif part.type == "named_imports":
                    for spec in part.named_children:
                        if spec.type != "import_specifier":
                            continue
                        bound = spec.child_by_field_name(
                            "alias"
                        ) or spec.child_by_field_name("name")
                        if bound is not None:
                            names.append(_text(bound))
        elif child.type == "import_require_clause":
            first = child.named_children[0] if child.named_children else None
            if first is not None and first.type == "identifier":
                names.append(_text(first))
    return names


def _declarator_names(node: Node) -> list[str]:
    names: list[str] = []
    for child in node.named_children:
        if child.type == "variable_declarator":
            names.extend(pattern_names(child.child_by_field_name("name")))
    return names


def _is_function_body(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.type not in FUNCTION_NODE_TYPES:
        return False
    body = parent.child_by_field_name("body")
    return body is not None and body.id == node.id


def _open_scope(
    table: ScopeTable, node: Node, kind: ScopeKind, parent: Scope
) -> Scope:
    scope = Scope(kind=kind, parent=parent)
    table.by_node_id[node.id] = scope
    return scope


def _enter(node: Node, scope: Scope, table: ScopeTable) -> Scope:
    """Register the bindings introduced by ``node``; return the scope for its children."""
    node_type = node.type

    if node_type in FUNCTION_NODE_TYPES:
        name_node = node.child_by_field_name("name")
        inner = _open_scope(table, node, "function", scope)
        if name_node is not None and name_node.type == "identifier":
            if node_type in _DECLARATION_FUNCTION_TYPES:
                scope.declare(_text(name_node))
            elif node_type != "method_definition":
                inner.declare(_text(name_node))
        for param_field in ("parameters", "parameter"):
            for name in pattern_names(node.child_by_field_name(param_field)):
                inner.declare(name)
        return inner

    if node_type in _CLASS_NODE_TYPES:
        name_node = node.child_by_field_name("name")
        inner = _open_scope(table, node, "class", scope)
        if name_node is not None:
            if node_type != "class":
                scope.declare(_text(name_node))
            inner.declare(_text(name_node))
        return inner

    if node_type == "catch_clause":
        inner = _open_scope(table, node, "catch", scope)
        for name in pattern_names(node.child_by_field_name("parameter")):
            inner.declare(name)
        return inner

    if node_type in _BLOCK_NODE_TYPES:
        if node_type == "statement_block" and _is_function_body(node):
            return scope
        inner = _open_scope(table, node, "block", scope)
        if node_type == "for_in_statement":
            kind_node = node.child_by_field_name("kind")
            if kind_node is not None:
                target = inner.function_scope() if kind_node.type == "var" else inner
                for name in pattern_names(node.child_by_field_name("left")):
                    target.declare(name)
        return inner

    if node_type == "variable_declaration":
        target = scope.function_scope()
        for name in _declarator_names(node):
            target.declare(name)
    elif node_type == "lexical_declaration":
        for name in _declarator_names(node):
            scope.declare(name)
    elif node_type == "import_statement":
        for name in _import_names(node):
            table.root.declare(name)
    elif node_type in ("function_signature", "enum_declaration", "internal_module", "module"):
        name_node = node.child_by_field_name("name")
        if name_node is not None and name_node.type == "identifier":
            scope.declare(_text(name_node))

    return scope


def build_scope_table(root: Node) -> ScopeTable:
    """Build the scope table for a whole tree in one traversal."""
    table = ScopeTable(root=Scope(kind="program"))
    table.by_node_id[root.id] = table.root

    stack: list[tuple[Node, Scope]] = [
        (child, table.root) for child in reversed(root.children)
    ]
    while stack:
        node, scope = stack.pop()
        child_scope = _enter(node, scope, table)
        stack.extend((child, child_scope) for child in reversed(node.children))

    return table


__all__ = [
    "FUNCTION_NODE_TYPES",
    "Scope",
    "ScopeKind",
    "ScopeTable",
    "build_scope_table",
    "pattern_names",
]
