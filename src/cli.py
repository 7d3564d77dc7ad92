"""Command-line interface for log-sweep."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from contract.console import CONSOLE_METHOD_SET
from removal.backup import BackupError, create_backup, restore_backup
from removal.models import RemovalSelection, SideEffectPolicy
from removal.runner import RunResult, remove_from_files
from report import ScanReport, scan_directory, write_report
from rules.config import ConfigError, LogSweepConfig, load_config
from utils import relative_display
from vcs.git import GitFilterError

_TOP_FILES = 10
_SIDE_EFFECT_EXAMPLES = 5


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory to scan (default: .)",
    )
    parser.add_argument(
        "-e",
        "--exclude",
        nargs="+",
        default=None,
        metavar="PATTERN",
        help="Extra exclude patterns or directory names (added to the defaults)",
    )


def _add_git_filters(parser: argparse.ArgumentParser, verb: str) -> None:
    parser.add_argument(
        "--git-mine",
        action="store_true",
        help=f"Only {verb} console statements authored by you (git blame)",
    )
    parser.add_argument(
        "--git-uncommitted",
        action="store_true",
        help=f"Only {verb} console statements in uncommitted changes",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="log-sweep",
        description="Scan and remove console statements safely",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="Scan for console statements")
    _add_common_paths(scan_parser)
    _add_git_filters(scan_parser, "show")
    scan_parser.add_argument(
        "-o", "--output", default=None, help="Write results to a JSON file"
    )

    remove_parser = subparsers.add_parser(
        "remove", help="Remove console statements"
    )
    _add_common_paths(remove_parser)
    _add_git_filters(remove_parser, "remove")
    remove_parser.add_argument(
        "-m",
        "--methods",
        nargs="+",
        default=None,
        metavar="METHOD",
        help="Console methods to remove (default: config methods)",
    )
    remove_parser.add_argument(
        "--side-effects",
        choices=[policy.value for policy in SideEffectPolicy],
        default=None,
        help="Skip or remove statements with side effects (default: config)",
    )
    remove_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview changes without applying them",
    )
    remove_parser.add_argument(
        "--no-backup",
        action="store_true",
        help="Skip creating a backup before removal",
    )
    remove_parser.add_argument(
        "-y", "--yes", action="store_true", help="Do not ask for confirmation"
    )
    remove_parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Files to process concurrently (default: config jobs)",
    )

    restore_parser = subparsers.add_parser("restore", help="Restore from backup")
    restore_parser.add_argument("backup", help="Backup archive (.tar.gz)")
    restore_parser.add_argument(
        "--to",
        default=".",
        help="Directory the backup was taken from (default: .)",
    )

    return parser


def _display_scan_results(report: ScanReport, root: Path) -> None:
    out = sys.stdout
    if report.git_filter_info:
        out.write(f"{report.git_filter_info}\n")
    out.write(f"Total console statements: {report.total_count}\n")
    out.write(f"Files with console statements: {report.file_count}\n")

    methods = sorted(
        ((m, s) for m, s in report.by_method.items() if s.count > 0),
        key=lambda item: -item[1].count,
    )
    if methods:
        out.write("\nBy method:\n")
        for method, stats in methods:
            out.write(f"  {method:<14} : {_plural(stats.count, 'occurrence')}\n")

    top_files = sorted(report.by_file.items(), key=lambda item: -len(item[1]))
    if top_files:
        out.write("\nTop files:\n")
        for index, (path, records) in enumerate(top_files[:_TOP_FILES], start=1):
            out.write(f"  {index:>2}. {relative_display(path, root)} ({len(records)})\n")
        if len(top_files) > _TOP_FILES:
            out.write(f"  ... and {len(top_files) - _TOP_FILES} more files\n")

    for path, message in sorted(report.parse_errors.items()):
        sys.stderr.write(f"warning: could not parse {relative_display(path, root)}: {message}\n")


def _display_side_effects(report: ScanReport, root: Path) -> None:
    sites = report.side_effect_sites()
    if not sites:
        return
    out = sys.stdout
    out.write(
        f"\nWarning: {_plural(len(sites), 'console statement')} with potential "
        "side effects (++, --, assignments, await, yield):\n"
    )
    for path, record in sites[:_SIDE_EFFECT_EXAMPLES]:
        out.write(f"  {relative_display(path, root)}:{record.line}\n")
        out.write(f"    {record.code}\n")
    if len(sites) > _SIDE_EFFECT_EXAMPLES:
        out.write(f"  ... and {len(sites) - _SIDE_EFFECT_EXAMPLES} more\n")


def _files_to_modify(
    report: ScanReport, methods: frozenset[str], policy: SideEffectPolicy
) -> list[Path]:
    selected: list[Path] = []
    for path, records in report.by_file.items():
        if any(
            r.method in methods
            and not (policy is SideEffectPolicy.SKIP and r.has_side_effects)
            for r in records
        ):
            selected.append(Path(path))
    return selected


def _confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _load(root: Path) -> LogSweepConfig | None:
    try:
        return load_config(root)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return None


def _handle_scan(
    root: Path,
    exclude: list[str] | None,
    output: str | None,
    *,
    git_mine: bool,
    git_uncommitted: bool,
) -> int:
    config = _load(root)
    if config is None:
        return 2

    try:
        report, _ = scan_directory(
            root,
            config=config,
            exclude_patterns=exclude,
            git_mine=git_mine,
            git_uncommitted=git_uncommitted,
        )
    except GitFilterError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    _display_scan_results(report, root)

    if output is not None:
        output_path = Path(output).expanduser().resolve()
        try:
            write_report(output_path, report)
        except OSError as exc:
            sys.stderr.write(f"error: could not write {output_path}: {exc}\n")
            return 1
        sys.stdout.write(f"\nResults saved to {output_path}\n")
    return 0


def _report_run(run: RunResult, root: Path, backup_path: Path | None) -> int:
    out = sys.stdout
    if run.dry_run:
        out.write(f"Dry run complete: would remove {_plural(run.removed_count, 'statement')}\n")
    else:
        out.write(f"Removed {_plural(run.removed_count, 'console statement')}\n")

    for reason, count in sorted(run.skipped_counts().items()):
        out.write(f"  skipped ({reason}): {count}\n")

    for failure in run.parse_failures:
        sys.stderr.write(
            f"warning: could not parse {relative_display(failure.path, root)}: "
            f"{failure.parse_error}\n"
        )
    for failure in run.write_failures:
        sys.stderr.write(
            f"error: could not write {relative_display(failure.path, root)}: "
            f"{failure.write_error}\n"
        )

    if backup_path is not None:
        out.write(f"\nTo restore, run: log-sweep restore {backup_path} --to {root}\n")

    return 1 if run.write_failures else 0


def _handle_remove(args: argparse.Namespace, root: Path) -> int:
    config = _load(root)
    if config is None:
        return 2

    methods = frozenset(args.methods if args.methods is not None else config.methods)
    unknown = sorted(methods - CONSOLE_METHOD_SET)
    if unknown:
        sys.stderr.write(f"error: unknown console methods: {', '.join(unknown)}\n")
        return 2
    policy = SideEffectPolicy(args.side_effects or config.side_effects)
    jobs = args.jobs if args.jobs is not None else config.jobs

    try:
        report, _ = scan_directory(
            root,
            config=config,
            exclude_patterns=args.exclude,
            git_mine=args.git_mine,
            git_uncommitted=args.git_uncommitted,
        )
    except GitFilterError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    if report.total_count == 0:
        sys.stdout.write("No console statements found!\n")
        return 0

    _display_scan_results(report, root)
    _display_side_effects(report, root)

    files = _files_to_modify(report, methods, policy)
    if not files:
        sys.stdout.write("\nNothing to remove for the selected methods.\n")
        return 0

    sys.stdout.write(f"\nFiles to modify: {len(files)}\n")
    sys.stdout.write(f"Methods: {', '.join(sorted(methods))}\n")
    for path in files[:_TOP_FILES]:
        sys.stdout.write(f"  {relative_display(path, root)}\n")
    if len(files) > _TOP_FILES:
        sys.stdout.write(f"  ... and {len(files) - _TOP_FILES} more files\n")

    if not args.dry_run and not args.yes:
        if not _confirm("This will modify your files. Continue?"):
            sys.stdout.write("Operation cancelled.\n")
            return 0

    backup_path: Path | None = None
    if config.backup and not args.no_backup and not args.dry_run:
        backup_dir = (
            (root / config.backup_dir).resolve() if config.backup_dir else None
        )
        try:
            backup_path = create_backup(files, root, backup_dir)
        except BackupError as exc:
            sys.stderr.write(f"error: {exc}\n")
            return 1
        sys.stdout.write(f"Backup created: {backup_path}\n")

    selection = RemovalSelection(
        methods=methods,
        side_effects=policy,
        filter_by_author=args.git_mine,
        filter_by_uncommitted=args.git_uncommitted,
    )
    try:
        run = remove_from_files(
            files, selection, base_dir=root, dry_run=args.dry_run, jobs=jobs
        )
    except Exception as exc:
        sys.stderr.write(f"error: {exc}\n")
        if backup_path is not None:
            _restore_after_failure(backup_path, root)
        return 2 if isinstance(exc, GitFilterError) else 1

    return _report_run(run, root, backup_path)


def _restore_after_failure(backup_path: Path, root: Path) -> None:
    try:
        restore_backup(backup_path, root)
    except BackupError as exc:
        sys.stderr.write(
            f"error: could not restore backup: {exc}\n"
            f"Restore manually: log-sweep restore {backup_path} --to {root}\n"
        )
        return
    sys.stdout.write("Backup restored.\n")


def _handle_restore(backup: str, target: str) -> int:
    backup_path = Path(backup).expanduser().resolve()
    if not backup_path.is_file():
        sys.stderr.write(f"error: backup file not found: {backup_path}\n")
        return 1

    target_dir = Path(target).expanduser().resolve()
    try:
        members = restore_backup(backup_path, target_dir)
    except BackupError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1

    sys.stdout.write(f"Restored {_plural(len(members), 'file')} into {target_dir}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "restore":
        return _handle_restore(args.backup, args.to)

    root = Path(args.root).expanduser().resolve()
    if not root.is_dir():
        sys.stderr.write(f"error: directory not found: {root}\n")
        return 2

    if args.command == "scan":
        return _handle_scan(
            root,
            args.exclude,
            args.output,
            git_mine=args.git_mine,
            git_uncommitted=args.git_uncommitted,
        )

    if args.command == "remove":
        return _handle_remove(args, root)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
