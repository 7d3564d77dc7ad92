"""Tree-sitter based console call-site extraction for JavaScript/TypeScript."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from contract.console import CONSOLE_METHOD_SET, RECEIVER_NAME
from parse.side_effects import has_side_effects
from utils import char_column, code_snippet

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tree_sitter import Node

    from parse.treesitter_js import SourceUnit

# Parents whose children form a statement list; an expression statement
# directly inside one of these can be dropped without leaving a hole.
STATEMENT_LIST_TYPES = frozenset(
    {"program", "statement_block", "switch_case", "switch_default"}
)

# Statements that end with their own closing brace and never continue
# into the next line.
_BRACE_TERMINATED_TYPES = frozenset(
    {
        "abstract_class_declaration",
        "class_declaration",
        "enum_declaration",
        "function_declaration",
        "generator_function_declaration",
        "interface_declaration",
        "internal_module",
        "module",
        "statement_block",
        "switch_statement",
        "try_statement",
    }
)

# Statements whose end is the end of their last child.
_TAIL_STATEMENT_TYPES = frozenset(
    {
        "else_clause",
        "export_statement",
        "for_in_statement",
        "for_statement",
        "if_statement",
        "labeled_statement",
        "while_statement",
        "with_statement",
    }
)

# A line starting with one of these continues an unterminated statement.
_CONTINUATION_BYTES = frozenset(b"([`+-/")


@dataclass(frozen=True)
class CallSite:
    """One recognised console method invocation.

    Lines and columns are 1-based; end columns are exclusive. Byte offsets
    index the UTF-8 encoded source the site was extracted from.
    """

    method: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int
    start_byte: int
    end_byte: int
    is_global_receiver: bool
    has_side_effects: bool
    is_statement_position: bool
    statement_span: tuple[int, int] | None
    statement_in_list: bool
    code: str
    # Neighbours of the enclosing statement inside its statement list.
    follows_open_statement: bool = False
    precedes_continuation: bool = False
    prev_statement_start: int | None = None


def _decode_node_text(node: Node) -> str:
    return (node.text or b"").decode("utf8", errors="ignore")


def _string_literal_value(node: Node) -> str | None:
    """Return the value of a plain string literal, or None if it has escapes."""
    if node.type != "string":
        return None
    parts: list[str] = []
    for child in node.named_children:
        if child.type != "string_fragment":
            return None
        parts.append(_decode_node_text(child))
    return "".join(parts)


def _console_method_name(callee: Node | None) -> str | None:
    """Match ``console.m``, ``console?.m`` and ``console['m']`` callees."""
    if callee is None:
        return None

    if callee.type == "member_expression":
        property_node = callee.child_by_field_name("property")
        if property_node is None or property_node.type != "property_identifier":
            return None
        method = _decode_node_text(property_node)
    elif callee.type == "subscript_expression":
        index_node = callee.child_by_field_name("index")
        if index_node is None:
            return None
        method = _string_literal_value(index_node)
        if method is None:
            return None
    else:
        return None

    object_node = callee.child_by_field_name("object")
    if object_node is None or object_node.type != "identifier":
        return None
    if _decode_node_text(object_node) != RECEIVER_NAME:
        return None

    return method if method in CONSOLE_METHOD_SET else None


def _iter_call_expressions(root: Node) -> Iterator[Node]:
    """Yield call expressions in source order (pre-order)."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "call_expression":
            yield node
        stack.extend(reversed(node.children))


def _sibling_statement(node: Node, *, forward: bool) -> Node | None:
    sibling = node.next_named_sibling if forward else node.prev_named_sibling
    while sibling is not None and sibling.type == "comment":
        sibling = sibling.next_named_sibling if forward else sibling.prev_named_sibling
    return sibling


def _last_named_child(node: Node) -> Node | None:
    for child in reversed(node.named_children):
        if child.type != "comment":
            return child
    return None


def _ends_open(node: Node) -> bool:
    """True when ``node`` lacks a terminator, so a following line could extend it."""
    text = node.text or b""
    if text.rstrip().endswith(b";"):
        return False
    if node.type in _BRACE_TERMINATED_TYPES:
        return False
    if node.type in _TAIL_STATEMENT_TYPES:
        tail = _last_named_child(node)
        return tail is None or _ends_open(tail)
    return True


def _starts_continuation(node: Node) -> bool:
    text = node.text or b""
    return bool(text) and text[0] in _CONTINUATION_BYTES


def _make_call_site(unit: SourceUnit, node: Node, method: str) -> CallSite:
    source_bytes = unit.source_bytes
    start_line = node.start_point[0] + 1
    end_line = node.end_point[0] + 1
    start_col = char_column(source_bytes, node.start_byte, node.start_point[1])
    end_col = char_column(source_bytes, node.end_byte, node.end_point[1])

    parent = node.parent
    is_statement = parent is not None and parent.type == "expression_statement"
    statement_span: tuple[int, int] | None = None
    statement_in_list = False
    follows_open = False
    precedes_continuation = False
    prev_start: int | None = None
    if is_statement and parent is not None:
        statement_span = (parent.start_byte, parent.end_byte)
        grandparent = parent.parent
        statement_in_list = (
            grandparent is not None and grandparent.type in STATEMENT_LIST_TYPES
        )
    if statement_in_list and parent is not None:
        prev_node = _sibling_statement(parent, forward=False)
        next_node = _sibling_statement(parent, forward=True)
        if prev_node is not None:
            prev_start = prev_node.start_byte
            follows_open = _ends_open(prev_node)
        precedes_continuation = next_node is not None and _starts_continuation(
            next_node
        )

    return CallSite(
        method=method,
        start_line=start_line,
        start_column=start_col,
        end_line=end_line,
        end_column=end_col,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
        is_global_receiver=not unit.scopes.is_bound(node, RECEIVER_NAME),
        has_side_effects=has_side_effects(node.child_by_field_name("arguments")),
        is_statement_position=is_statement,
        statement_span=statement_span,
        statement_in_list=statement_in_list,
        code=code_snippet(unit.text, start_line, start_col, end_line, end_col),
        follows_open_statement=follows_open,
        precedes_continuation=precedes_continuation,
        prev_statement_start=prev_start,
    )


def extract_console_calls(unit: SourceUnit) -> list[CallSite]:
    """Extract every console method call site from a parsed unit.

    Sites are returned in source order. Shadowed receivers are included
    with ``is_global_receiver=False``; callers decide what to do with them.
    """
    sites: list[CallSite] = []
    for node in _iter_call_expressions(unit.tree.root_node):
        arguments = node.child_by_field_name("arguments")
        if arguments is None or arguments.type != "arguments":
            continue
        method = _console_method_name(node.child_by_field_name("function"))
        if method is None:
            continue
        sites.append(_make_call_site(unit, node, method))
    return sites


__all__ = ["STATEMENT_LIST_TYPES", "CallSite", "extract_console_calls"]
