"""Multi-file console removal: git preflight, per-file processing, write-back."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING

from parse.treesitter_js import ParseFailure, parse_file
from removal.planner import remove_from_unit
from vcs.git import GitFilterError, get_current_user, is_git_repository
from vcs.oracles import OracleCache

if TYPE_CHECKING:
    from collections.abc import Sequence

    from removal.models import RemovalOutcome, RemovalSelection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileResult:
    """Per-file result: an outcome, or the error that prevented one."""

    path: Path
    outcome: RemovalOutcome | None = None
    parse_error: str | None = None
    write_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.parse_error is None and self.write_error is None


@dataclass
class RunResult:
    """Aggregate result of one removal run."""

    files: list[FileResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def removed_count(self) -> int:
        return sum(f.outcome.removed_count for f in self.files if f.outcome)

    @property
    def changed_files(self) -> list[Path]:
        return [f.path for f in self.files if f.outcome and f.outcome.changed]

    @property
    def parse_failures(self) -> list[FileResult]:
        return [f for f in self.files if f.parse_error is not None]

    @property
    def write_failures(self) -> list[FileResult]:
        return [f for f in self.files if f.write_error is not None]

    def skipped_counts(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for result in self.files:
            if result.outcome is None:
                continue
            for reason, count in result.outcome.skipped.items():
                totals[reason.value] = totals.get(reason.value, 0) + count
        return totals


def prepare_selection(selection: RemovalSelection, base_dir: Path) -> RemovalSelection:
    """Validate git filtering up front and fill in the current user if needed.

    Raises:
        GitFilterError: If a git filter was requested outside a repository
            or the user identity cannot be determined.
    """
    if not selection.uses_git:
        return selection

    if not is_git_repository(base_dir):
        msg = "Git filtering requested but directory is not a git repository"
        raise GitFilterError(msg)

    if selection.filter_by_author and not selection.current_user_email:
        user = get_current_user(base_dir)
        return replace(selection, current_user_email=user.email)
    return selection


def process_file(
    file_path: Path,
    selection: RemovalSelection,
    *,
    oracles: OracleCache | None = None,
    dry_run: bool = False,
) -> FileResult:
    """Parse, plan, regenerate and (unless ``dry_run``) write back one file."""
    try:
        unit = parse_file(file_path)
    except ParseFailure as exc:
        logger.warning("Could not parse %s: %s", file_path, exc.message)
        return FileResult(path=file_path, parse_error=exc.message)

    outcome = remove_from_unit(unit, selection, oracles)

    if outcome.changed and not dry_run and outcome.text is not None:
        try:
            file_path.write_text(outcome.text, encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write %s: %s", file_path, exc)
            return FileResult(path=file_path, outcome=outcome, write_error=str(exc))

    return FileResult(path=file_path, outcome=outcome)


def remove_from_files(
    paths: Sequence[Path],
    selection: RemovalSelection,
    *,
    base_dir: Path,
    dry_run: bool = False,
    jobs: int = 1,
) -> RunResult:
    """Remove eligible console calls from every file in ``paths``.

    Git preflight runs before any file is touched. Files are independent;
    with ``jobs > 1`` they are processed on a thread pool, and results keep
    the input order either way. Failed writes are reported, not rolled back.
    """
    selection = prepare_selection(selection, base_dir)
    oracles = OracleCache(base_dir) if selection.uses_git else None

    def _run(path: Path) -> FileResult:
        return process_file(path, selection, oracles=oracles, dry_run=dry_run)

    if jobs > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            results = list(pool.map(_run, paths))
    else:
        results = [_run(path) for path in paths]

    run = RunResult(files=results, dry_run=dry_run)
    logger.debug(
        "Removed %d call sites across %d files (%d parse failures, %d write failures)",
        run.removed_count,
        len(run.changed_files),
        len(run.parse_failures),
        len(run.write_failures),
    )
    return run


__all__ = [
    "FileResult",
    "RunResult",
    "prepare_selection",
    "process_file",
    "remove_from_files",
]
