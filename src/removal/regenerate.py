"""Source regeneration by splicing planned edits into the original bytes.

Untouched regions are copied verbatim, so comments, formatting and line
numbers outside removed statements survive unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass

from contract.console import PLACEHOLDER_EXPRESSION

_HSPACE = b" \t"
_EMPTY_BLOCK = b"{}"
_SEPARATOR = b";"


@dataclass(frozen=True)
class Edit:
    """Replace ``source[start:end]`` with ``replacement``.

    ``collapse_line`` marks an in-line deletion: if the line it lands on is
    left holding only whitespace, the whole line is dropped.
    """

    start: int
    end: int
    replacement: bytes = b""
    collapse_line: bool = False

    def covers(self, start: int, end: int) -> bool:
        return self.start <= start and end <= self.end


def _line_start(source: bytes, offset: int) -> int:
    return source.rfind(b"\n", 0, offset) + 1


def _line_end(source: bytes, offset: int) -> int:
    """Offset just past the newline ending the line at ``offset`` (or EOF)."""
    newline = source.find(b"\n", offset)
    return len(source) if newline == -1 else newline + 1


def statement_deletion(
    source: bytes,
    start: int,
    end: int,
    *,
    in_statement_list: bool,
    keep_separator: bool = False,
) -> Edit:
    """Build the edit deleting the statement at ``source[start:end]``.

    With ``keep_separator`` the statement is replaced by an empty statement
    (``;``) so its unterminated predecessor cannot run into the next line.
    """
    if not in_statement_list:
        return Edit(start, end, _EMPTY_BLOCK)
    if keep_separator:
        return Edit(start, end, _SEPARATOR)

    line_start = _line_start(source, start)
    line_end = _line_end(source, end)
    prefix = source[line_start:start]
    suffix = source[end:line_end]

    if not prefix.strip() and not suffix.strip():
        return Edit(line_start, line_end)

    if not suffix.strip():
        trimmed_start = start
        while trimmed_start > line_start and source[trimmed_start - 1] in _HSPACE:
            trimmed_start -= 1
        return Edit(trimmed_start, end, collapse_line=True)

    trimmed_end = end
    while trimmed_end < len(source) and source[trimmed_end] in _HSPACE:
        trimmed_end += 1
    return Edit(start, trimmed_end, collapse_line=True)


def placeholder_replacement(start: int, end: int) -> Edit:
    """Build the edit replacing a call expression with the placeholder."""
    return Edit(start, end, PLACEHOLDER_EXPRESSION.encode("utf8"))


def _collapse_blank_lines(output: bytearray, offsets: list[int]) -> None:
    for offset in sorted(set(offsets), reverse=True):
        line_start = _line_start(bytes(output), offset)
        line_end = _line_end(bytes(output), offset)
        if not bytes(output[line_start:line_end]).strip():
            del output[line_start:line_end]


def apply_edits(source: bytes, edits: list[Edit]) -> bytes:
    """Apply non-overlapping edits in one ascending pass.

    Edits nested inside an earlier applied edit are ignored, so removed
    subtrees are never revisited. Two deletions on one line may share the
    whitespace between them; the later one is clipped to start at the
    cursor.
    """
    output = bytearray()
    collapse_offsets: list[int] = []
    cursor = 0
    for edit in sorted(edits, key=lambda e: (e.start, -e.end)):
        if edit.end <= cursor:
            continue
        start = max(edit.start, cursor)
        output += source[cursor:start]
        if edit.collapse_line:
            collapse_offsets.append(len(output))
        output += edit.replacement
        cursor = edit.end
    output += source[cursor:]

    _collapse_blank_lines(output, collapse_offsets)
    return bytes(output)


__all__ = ["Edit", "apply_edits", "placeholder_replacement", "statement_deletion"]
