"""Shared utilities for log-sweep."""

from __future__ import annotations

from pathlib import Path


def char_column(source_bytes: bytes, byte_offset: int, byte_column: int) -> int:
    """Convert a Tree-sitter byte column into a 1-based character column.

    Args:
        source_bytes: UTF-8 encoded source
        byte_offset: Absolute byte offset of the position
        byte_column: Byte column of the position within its line

    Examples:
        >>> char_column(b"x = 1", 4, 4)
        5
        >>> char_column("é = 1".encode(), 5, 5)
        5
    """
    line_start = byte_offset - byte_column
    prefix = source_bytes[line_start:byte_offset].decode("utf8", errors="ignore")
    return len(prefix) + 1


def code_snippet(
    text: str, start_line: int, start_col: int, end_line: int, end_col: int
) -> str:
    """Return a short one-line rendering of a source span.

    Lines and columns are 1-based; ``end_col`` is exclusive. Two-line spans
    are joined with a space, longer spans show first and last line around
    an ellipsis.
    """
    lines = text.split("\n")
    if start_line == end_line:
        return lines[start_line - 1][start_col - 1 : end_col - 1].strip()

    first = lines[start_line - 1][start_col - 1 :].strip()
    last = lines[end_line - 1][: end_col - 1].strip()
    if end_line - start_line == 1:
        return f"{first} {last}"
    return f"{first} ... {last}"


def relative_display(path: str | Path, root: Path) -> str:
    """Render ``path`` relative to ``root`` when possible (POSIX separators)."""
    path_obj = Path(path)
    try:
        return path_obj.relative_to(root).as_posix()
    except ValueError:
        return path_obj.as_posix()
