"""Line-level version-control oracles: authorship and uncommitted ranges.

Both oracles are parsed from raw git output and memoized per absolute file
path for the lifetime of one run. A query that fails degrades to the
state that excludes every line; it never widens eligibility.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from vcs import git
from vcs.git import OracleUnavailable

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

# <40-hex commit> <orig-line> <final-line> [<group-size>]
_BLAME_HEADER = re.compile(r"^[0-9a-f]{40} \d+ (\d+)(?: \d+)?$")
# @@ -<a>[,<b>] +<c>[,<d>] @@
_HUNK_HEADER = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,(\d+))? @@")


class HistoryStatus(str, Enum):
    """How much blame history is known for a file."""

    TRACKED = "tracked"
    UNTRACKED = "untracked"
    UNAVAILABLE = "unavailable"


class RangeKind(str, Enum):
    """Shape of a file's uncommitted range set."""

    LINES = "lines"
    ALL = "all"
    NONE = "none"


@dataclass(frozen=True)
class LineAuthors:
    """Mapping from line number to author e-mail for one file."""

    status: HistoryStatus
    authors: dict[int, str] = field(default_factory=dict)

    def author_of(self, line: int) -> str | None:
        return self.authors.get(line)

    def is_authored_by(self, line: int, email: str | None) -> bool:
        """Return True if ``line`` belongs to ``email``.

        Lines of a never-committed file belong to whoever runs the tool;
        lines with unavailable history belong to nobody.
        """
        if self.status is HistoryStatus.UNTRACKED:
            return True
        if self.status is HistoryStatus.UNAVAILABLE or not email:
            return False
        return self.authors.get(line) == email


@dataclass(frozen=True)
class UncommittedRanges:
    """Lines changed relative to the last commit for one file."""

    kind: RangeKind
    lines: frozenset[int] = frozenset()

    @classmethod
    def all_lines(cls) -> UncommittedRanges:
        return cls(kind=RangeKind.ALL)

    @classmethod
    def no_lines(cls) -> UncommittedRanges:
        return cls(kind=RangeKind.NONE)

    def contains(self, line: int) -> bool:
        if self.kind is RangeKind.ALL:
            return True
        if self.kind is RangeKind.NONE:
            return False
        return line in self.lines


def parse_blame_porcelain(output: str) -> dict[int, str]:
    """Parse ``git blame --line-porcelain`` output into line -> author e-mail.

    Each header line names the final line number; the next ``author-mail``
    line in the stream supplies that line's author.
    """
    authors: dict[int, str] = {}
    current_line = 0
    for raw in output.splitlines():
        header = _BLAME_HEADER.match(raw)
        if header:
            current_line = int(header.group(1))
            continue
        if raw.startswith("author-mail ") and current_line > 0:
            email = raw[len("author-mail ") :].strip()
            if email.startswith("<") and email.endswith(">"):
                email = email[1:-1]
            if email:
                authors[current_line] = email
    return authors


def parse_diff_hunks(output: str) -> frozenset[int]:
    """Parse a zero-context unified diff into the set of changed new-side lines."""
    lines: set[int] = set()
    for raw in output.splitlines():
        match = _HUNK_HEADER.match(raw)
        if not match:
            continue
        start = int(match.group(1))
        count = int(match.group(2)) if match.group(2) is not None else 1
        lines.update(range(start, start + count))
    return frozenset(lines)


def _untracked(file_path: Path, base_dir: Path) -> bool | None:
    """True if untracked, False if tracked, None if git cannot tell."""
    try:
        return not git.is_tracked(file_path, base_dir)
    except OracleUnavailable as exc:
        logger.warning("Could not check tracking status for %s: %s", file_path, exc)
        return None


def query_line_authors(file_path: Path, base_dir: Path) -> LineAuthors:
    """Run blame for one file and build its LineAuthors."""
    try:
        output = git.blame_file(file_path, base_dir)
    except OracleUnavailable as exc:
        if _untracked(file_path, base_dir):
            logger.debug("No blame history for untracked file %s", file_path)
            return LineAuthors(status=HistoryStatus.UNTRACKED)
        logger.warning("Could not get git blame for %s: %s", file_path, exc)
        return LineAuthors(status=HistoryStatus.UNAVAILABLE)
    return LineAuthors(
        status=HistoryStatus.TRACKED, authors=parse_blame_porcelain(output)
    )


def query_uncommitted_ranges(file_path: Path, base_dir: Path) -> UncommittedRanges:
    """Run a zero-context diff against HEAD for one file and build its ranges."""
    try:
        output = git.diff_file(file_path, base_dir)
    except OracleUnavailable as exc:
        logger.warning("Could not get git diff for %s: %s", file_path, exc)
        return UncommittedRanges.no_lines()

    changed = parse_diff_hunks(output)
    if changed:
        return UncommittedRanges(kind=RangeKind.LINES, lines=changed)
    if not output.strip() and _untracked(file_path, base_dir):
        return UncommittedRanges.all_lines()
    return UncommittedRanges.no_lines()


class OracleCache:
    """Per-run memo of blame and diff results keyed by absolute file path.

    The first access for a path populates its entry; later accesses reuse
    it. Entries for different paths are filled independently, so files can
    be processed concurrently.
    """

    def __init__(
        self,
        base_dir: Path,
        *,
        authors_query: Callable[[Path, Path], LineAuthors] = query_line_authors,
        ranges_query: Callable[[Path, Path], UncommittedRanges] = query_uncommitted_ranges,
    ) -> None:
        self.base_dir = base_dir
        self._authors_query = authors_query
        self._ranges_query = ranges_query
        self._authors: dict[Path, LineAuthors] = {}
        self._ranges: dict[Path, UncommittedRanges] = {}
        self._guard = threading.Lock()
        self._key_locks: dict[tuple[str, Path], threading.Lock] = {}

    def _lock_for(self, kind: str, key: Path) -> threading.Lock:
        with self._guard:
            return self._key_locks.setdefault((kind, key), threading.Lock())

    def line_authors(self, file_path: str | Path) -> LineAuthors:
        key = Path(file_path).resolve()
        cached = self._authors.get(key)
        if cached is not None:
            return cached
        with self._lock_for("blame", key):
            if key not in self._authors:
                self._authors[key] = self._authors_query(key, self.base_dir)
            return self._authors[key]

    def uncommitted_ranges(self, file_path: str | Path) -> UncommittedRanges:
        key = Path(file_path).resolve()
        cached = self._ranges.get(key)
        if cached is not None:
            return cached
        with self._lock_for("diff", key):
            if key not in self._ranges:
                self._ranges[key] = self._ranges_query(key, self.base_dir)
            return self._ranges[key]


__all__ = [
    "HistoryStatus",
    "LineAuthors",
    "OracleCache",
    "RangeKind",
    "UncommittedRanges",
    "parse_blame_porcelain",
    "parse_diff_hunks",
    "query_line_authors",
    "query_uncommitted_ranges",
]
