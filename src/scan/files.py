"""File scanning utilities for JavaScript and TypeScript sources."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from contract.console import DEFAULT_EXTENSIONS

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

_GLOB_CHARS = frozenset("*?[")


def _matches_exclude(rel_path_str: str, parts: tuple[str, ...], pattern: str) -> bool:
    """Bare names match any path component; other patterns use fnmatch."""
    if "/" not in pattern and not _GLOB_CHARS.intersection(pattern):
        return pattern in parts
    if "/" not in pattern:
        return any(fnmatch(part, pattern) for part in parts)
    return fnmatch(rel_path_str, pattern)


def _should_include_file(
    path: Path,
    directory: Path,
    extensions: frozenset[str],
    gitignore_matches: Callable[[str], bool] | None,
    include_patterns: Sequence[str] | None,
    exclude_patterns: Sequence[str] | None,
) -> bool:
    """Check if a file should be included based on all filtering rules."""
    if path.suffix.lower() not in extensions:
        return False

    if not path.is_file() or path.is_symlink():
        return False

    if not _is_within_root(path, directory):
        return False

    try:
        rel_path = path.relative_to(directory)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    if include_patterns and not any(
        fnmatch(rel_path_str, pat) for pat in include_patterns
    ):
        return False

    has_excluded_match = exclude_patterns and any(
        _matches_exclude(rel_path_str, rel_path.parts, pat) for pat in exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {
        path for path in gitignore_paths if path.is_file() and not path.is_symlink()
    }
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def _is_pruned_dir(rel_parts: tuple[str, ...], exclude_patterns: Sequence[str]) -> bool:
    # Only name patterns can prune: any file below a matching directory
    # carries that name as a path part and would be excluded anyway.
    return any(
        "/" not in pattern and _matches_exclude("", rel_parts, pattern)
        for pattern in exclude_patterns
    )


def _walk_candidates(
    directory: Path, exclude_patterns: Sequence[str] | None
) -> Iterator[Path]:
    """Yield files under ``directory`` without descending into excluded dirs.

    Symlinked directories are not followed.
    """
    for dirpath, dirnames, filenames in os.walk(directory, followlinks=False):
        current = Path(dirpath)
        if exclude_patterns:
            rel_dir = current.relative_to(directory).parts
            dirnames[:] = [
                name
                for name in dirnames
                if not _is_pruned_dir((*rel_dir, name), exclude_patterns)
            ]
        for name in filenames:
            yield current / name


def find_source_files(
    directory: Path,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    include_patterns: Sequence[str] | None = None,
    exclude_patterns: Sequence[str] | None = None,
    respect_gitignore: bool = True,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find all JavaScript/TypeScript files in a directory.

    Args:
        directory: Directory to search
        extensions: File suffixes to include (with leading dot)
        include_patterns: Optional list of fnmatch patterns; if provided,
            files must match at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns or bare
            directory names; matching files are excluded
        respect_gitignore: Skip files matched by .gitignore
        nested_gitignore: Also honour .gitignore files below the root

    Yields:
        Path objects for each source file found, sorted lexicographically
        by relative path for deterministic ordering.
    """
    gitignore_matches = (
        _build_gitignore_matcher(directory, nested_gitignore=nested_gitignore)
        if respect_gitignore
        else None
    )
    suffixes = frozenset(ext.lower() for ext in extensions)

    matched_files = [
        path
        for path in _walk_candidates(directory, exclude_patterns)
        if _should_include_file(
            path,
            directory,
            suffixes,
            gitignore_matches,
            include_patterns,
            exclude_patterns,
        )
    ]

    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


__all__ = ["_should_include_file", "find_source_files"]
