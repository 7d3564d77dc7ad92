"""Parsing utilities for JavaScript and TypeScript sources."""

from parse.scopes import Scope, ScopeTable, build_scope_table
from parse.side_effects import has_side_effects
from parse.treesitter_calls import CallSite, extract_console_calls
from parse.treesitter_js import (
    ParseFailure,
    SourceUnit,
    infer_module_kind,
    parse_file,
    parse_source,
)

__all__ = [
    "CallSite",
    "ParseFailure",
    "Scope",
    "ScopeTable",
    "SourceUnit",
    "build_scope_table",
    "extract_console_calls",
    "has_side_effects",
    "infer_module_kind",
    "parse_file",
    "parse_source",
]
