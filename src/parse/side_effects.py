"""Syntactic side-effect detection for call arguments."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tree_sitter import Node

# Node types that may change program state when the argument is evaluated.
# Nested function bodies are searched too: a closure that mutates state
# is flagged even though it may never run.
SIDE_EFFECT_NODE_TYPES = frozenset(
    {
        "update_expression",
        "assignment_expression",
        "augmented_assignment_expression",
        "await_expression",
        "yield_expression",
    }
)


def has_side_effects(arguments: Node | None) -> bool:
    """Return True if any argument subtree contains a potentially effectful node."""
    if arguments is None:
        return False

    stack = list(arguments.named_children)
    while stack:
        node = stack.pop()
        if node.type in SIDE_EFFECT_NODE_TYPES:
            return True
        stack.extend(node.named_children)
    return False


__all__ = ["SIDE_EFFECT_NODE_TYPES", "has_side_effects"]
