"""Console call-site contract definitions.

This module defines the stable names shared by the classifier, the planner
and the report: the receiver identifier, the recognised method catalog and
the placeholder used when a call is removed from an expression.
"""

from __future__ import annotations

# Identifier that must appear as the call receiver (``console.log(...)``).
RECEIVER_NAME = "console"

# Recognised console methods (allow-list). Unknown property names are ignored.
CONSOLE_METHODS: tuple[str, ...] = (
    "log",
    "warn",
    "info",
    "debug",
    "error",
    "trace",
    "table",
    "dir",
    "dirxml",
    "assert",
    "count",
    "countReset",
    "time",
    "timeEnd",
    "timeLog",
    "timeStamp",
    "group",
    "groupCollapsed",
    "groupEnd",
    "profile",
    "profileEnd",
    "clear",
)

CONSOLE_METHOD_SET = frozenset(CONSOLE_METHODS)

# Methods pre-selected for removal when the caller does not choose.
DEFAULT_REMOVAL_METHODS: tuple[str, ...] = tuple(
    method for method in CONSOLE_METHODS if method != "error"
)

# Effect-free expression substituted for a call used as a value.
PLACEHOLDER_EXPRESSION = "undefined"

# Source file suffixes scanned by default.
DEFAULT_EXTENSIONS: tuple[str, ...] = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")

BACKUP_PREFIX = "log-sweep-backup-"


__all__ = [
    "BACKUP_PREFIX",
    "CONSOLE_METHODS",
    "CONSOLE_METHOD_SET",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_REMOVAL_METHODS",
    "PLACEHOLDER_EXPRESSION",
    "RECEIVER_NAME",
]
