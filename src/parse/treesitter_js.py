"""Tree-sitter based parsing for JavaScript and TypeScript sources."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Parser

from parse.scopes import ScopeTable, build_scope_table

if TYPE_CHECKING:
    from tree_sitter import Tree

ModuleKind = Literal["javascript", "typescript", "tsx"]

_SUFFIX_KINDS: dict[str, ModuleKind] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

_LOCAL = threading.local()


class ParseFailure(Exception):
    """Raised when a source file cannot be parsed into a complete tree."""

    def __init__(self, path: str | None, message: str) -> None:
        super().__init__(f"{path or '<source>'}: {message}")
        self.path = path
        self.message = message


def _load_language(kind: ModuleKind) -> Language:
    if kind == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    if kind == "tsx":
        return Language(tree_sitter_typescript.language_tsx())
    return Language(tree_sitter_javascript.language())


def _get_parser(kind: ModuleKind) -> Parser:
    """Return a Tree-sitter parser for ``kind``, cached per thread."""
    parsers: dict[str, Parser] | None = getattr(_LOCAL, "parsers", None)
    if parsers is None:
        parsers = {}
        _LOCAL.parsers = parsers

    parser = parsers.get(kind)
    if parser is None:
        parser = Parser(_load_language(kind))
        parsers[kind] = parser
    return parser


def infer_module_kind(path: str | Path | None) -> ModuleKind:
    """Infer the grammar to use from a file suffix (JavaScript by default)."""
    if path is None:
        return "javascript"
    return _SUFFIX_KINDS.get(Path(path).suffix.lower(), "javascript")


@dataclass(frozen=True, eq=False)
class SourceUnit:
    """A parsed source file: raw text, its syntax tree and its scope table."""

    path: str | None
    text: str
    source_bytes: bytes
    kind: ModuleKind
    tree: Tree = field(repr=False)
    scopes: ScopeTable = field(repr=False)


def _first_error_point(tree: Tree) -> tuple[int, int] | None:
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if not node.has_error:
            continue
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1, node.start_point[1] + 1
        stack.extend(reversed(node.children))
    return None


def parse_source(
    text: str,
    *,
    path: str | None = None,
    kind: ModuleKind | None = None,
) -> SourceUnit:
    """Parse ``text`` into a SourceUnit.

    Plain JavaScript that does not parse cleanly is retried with the TSX
    grammar so annotated sources still load. Any remaining syntax error
    raises ParseFailure; a partial tree is never returned.
    """
    resolved_kind = kind or infer_module_kind(path)
    source_bytes = text.encode("utf8")

    tree = _get_parser(resolved_kind).parse(source_bytes)
    if tree.root_node.has_error and resolved_kind == "javascript":
        retry = _get_parser("tsx").parse(source_bytes)
        if not retry.root_node.has_error:
            tree = retry
            resolved_kind = "tsx"

    if tree.root_node.has_error:
        point = _first_error_point(tree)
        where = f" at L{point[0]}:C{point[1]}" if point else ""
        raise ParseFailure(path, f"syntax error{where}")

    return SourceUnit(
        path=path,
        text=text,
        source_bytes=source_bytes,
        kind=resolved_kind,
        tree=tree,
        scopes=build_scope_table(tree.root_node),
    )


def parse_file(file_path: str | Path) -> SourceUnit:
    """Read and parse a file; unreadable or undecodable files are ParseFailures."""
    path_obj = Path(file_path)
    try:
        text = path_obj.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseFailure(str(path_obj), f"cannot read file: {exc}") from exc
    return parse_source(text, path=str(path_obj))


__all__ = [
    "ModuleKind",
    "ParseFailure",
    "SourceUnit",
    "infer_module_kind",
    "parse_file",
    "parse_source",
]
