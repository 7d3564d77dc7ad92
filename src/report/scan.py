"""Directory scan producing the aggregate console call-site report."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from parse.treesitter_calls import extract_console_calls
from parse.treesitter_js import ParseFailure, parse_file
from report.models import CallSiteRecord, ScanReport
from rules.config import LogSweepConfig, load_config, merged_excludes
from scan.files import find_source_files
from vcs.git import (
    GitFilterError,
    GitUser,
    OracleUnavailable,
    get_current_user,
    get_uncommitted_files,
    is_git_repository,
)
from vcs.oracles import OracleCache

if TYPE_CHECKING:
    from pathlib import Path

    from parse.treesitter_calls import CallSite

logger = logging.getLogger(__name__)


def _git_filter_info(user: GitUser | None, git_uncommitted: bool) -> str | None:
    if user is not None and git_uncommitted:
        return f"Filtered to console statements by: {user.display()} (uncommitted changes only)"
    if user is not None:
        return f"Filtered to console statements by: {user.display()}"
    if git_uncommitted:
        return "Filtered to uncommitted changes only"
    return None


def _passes_git_filters(
    site: CallSite,
    path: Path,
    *,
    oracles: OracleCache | None,
    user: GitUser | None,
    git_uncommitted: bool,
) -> bool:
    if oracles is None:
        return True
    if user is not None and not oracles.line_authors(path).is_authored_by(
        site.start_line, user.email
    ):
        return False
    return not git_uncommitted or oracles.uncommitted_ranges(path).contains(
        site.start_line
    )


def _to_record(site: CallSite) -> CallSiteRecord:
    return CallSiteRecord(
        method=site.method,
        line=site.start_line,
        column=site.start_column,
        end_line=site.end_line,
        end_column=site.end_column,
        code=site.code,
        has_side_effects=site.has_side_effects,
    )


def scan_directory(
    root: Path,
    *,
    config: LogSweepConfig | None = None,
    exclude_patterns: list[str] | None = None,
    git_mine: bool = False,
    git_uncommitted: bool = False,
) -> tuple[ScanReport, list[Path]]:
    """Scan ``root`` for global console calls and build the aggregate report.

    Shadowed receivers are left out. With git filters enabled, only sites
    authored by the current user and/or on uncommitted lines are kept.

    Returns:
        The report and the list of files that were scanned.

    Raises:
        GitFilterError: If git filtering was requested but cannot work.
    """
    if config is None:
        config = load_config(root)

    report = ScanReport()
    oracles: OracleCache | None = None
    user: GitUser | None = None
    uncommitted_files: set[Path] | None = None

    if git_mine or git_uncommitted:
        if not is_git_repository(root):
            msg = "Git filtering requested but directory is not a git repository"
            raise GitFilterError(msg)
        oracles = OracleCache(root)
        if git_mine:
            user = get_current_user(root)
        if git_uncommitted:
            try:
                uncommitted_files = get_uncommitted_files(root)
            except OracleUnavailable as exc:
                logger.warning("Could not get git status, checking every file: %s", exc)
        report.git_filtered = True
        report.git_filter_info = _git_filter_info(user, git_uncommitted)

    files = list(
        find_source_files(
            root,
            extensions=config.extensions,
            include_patterns=config.include,
            exclude_patterns=merged_excludes(config, exclude_patterns),
            respect_gitignore=config.respect_gitignore,
            nested_gitignore=config.nested_gitignore,
        )
    )
    if uncommitted_files is not None:
        files = [path for path in files if path.resolve() in uncommitted_files]

    for path in files:
        try:
            unit = parse_file(path)
        except ParseFailure as exc:
            logger.warning("Could not parse %s: %s", path, exc.message)
            report.parse_errors[str(path)] = exc.message
            continue

        records = [
            _to_record(site)
            for site in extract_console_calls(unit)
            if site.is_global_receiver
            and _passes_git_filters(
                site,
                path,
                oracles=oracles,
                user=user,
                git_uncommitted=git_uncommitted,
            )
        ]
        report.add_file(str(path), records)

    return report, files


__all__ = ["scan_directory"]
