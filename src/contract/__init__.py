"""Stable names shared across log-sweep packages."""

from contract.console import (
    BACKUP_PREFIX,
    CONSOLE_METHOD_SET,
    CONSOLE_METHODS,
    DEFAULT_EXTENSIONS,
    DEFAULT_REMOVAL_METHODS,
    PLACEHOLDER_EXPRESSION,
    RECEIVER_NAME,
)

__all__ = [
    "BACKUP_PREFIX",
    "CONSOLE_METHODS",
    "CONSOLE_METHOD_SET",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_REMOVAL_METHODS",
    "PLACEHOLDER_EXPRESSION",
    "RECEIVER_NAME",
]
