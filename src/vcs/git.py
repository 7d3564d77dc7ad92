"""Git queries backing the line-level authorship and change filters.

Every query runs ``git`` as an argument list (never through a shell) with a
bounded timeout. Oracle queries raise OracleUnavailable on any failure so
callers can degrade the affected filter instead of aborting the run.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Default timeout for git commands
_GIT_TIMEOUT = 30


class OracleUnavailable(Exception):
    """Raised when a blame/diff/status query cannot produce a result."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        """Initialize with message and the git exit status, if git ran."""
        super().__init__(message)
        self.returncode = returncode


class GitFilterError(Exception):
    """Raised when git filtering was requested but cannot work at all."""


@dataclass(frozen=True)
class GitUser:
    """Identity of the configured git user."""

    email: str
    name: str

    def display(self) -> str:
        return f"{self.name} <{self.email}>" if self.name else f"<{self.email}>"


def _run_git(args: list[str], cwd: Path) -> str:
    """Run ``git <args>`` in ``cwd`` and return stdout, or raise OracleUnavailable."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=_GIT_TIMEOUT,
            errors="replace",
        )
    except subprocess.TimeoutExpired as exc:
        msg = f"git {args[0]} timed out after {_GIT_TIMEOUT}s"
        raise OracleUnavailable(msg) from exc
    except FileNotFoundError as exc:
        msg = "git command not found"
        raise OracleUnavailable(msg) from exc
    except OSError as exc:
        msg = f"git {args[0]} failed: {exc}"
        raise OracleUnavailable(msg) from exc

    if result.returncode != 0:
        stderr_msg = result.stderr[:200].strip() if result.stderr else "unknown"
        msg = f"git {args[0]} exited with {result.returncode}: {stderr_msg}"
        raise OracleUnavailable(msg, returncode=result.returncode)

    return result.stdout


def is_git_repository(directory: Path) -> bool:
    """Return True if ``directory`` is inside a git work tree."""
    try:
        _run_git(["rev-parse", "--git-dir"], directory)
    except OracleUnavailable as exc:
        logger.debug("%s is not a git repository: %s", directory, exc)
        return False
    return True


def get_current_user(directory: Path) -> GitUser:
    """Return the configured git user for ``directory``.

    Raises:
        GitFilterError: If no user e-mail is configured.
    """
    try:
        email = _run_git(["config", "user.email"], directory).strip()
    except OracleUnavailable as exc:
        msg = "Could not get git user. Make sure git is configured (git config user.email)"
        raise GitFilterError(msg) from exc
    if not email:
        msg = "Could not get git user. Make sure git is configured (git config user.email)"
        raise GitFilterError(msg)

    try:
        name = _run_git(["config", "user.name"], directory).strip()
    except OracleUnavailable:
        name = ""

    return GitUser(email=email, name=name)


_C_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    "\\": 0x5C,
    '"': 0x22,
}


def _unquote_status_path(raw: str) -> str:
    """Undo git's C-style path quoting (``"\\303\\251.js"`` -> ``é.js``).

    Octal escapes are raw bytes of the UTF-8 encoded name.
    """
    raw = raw.strip()
    if len(raw) < 2 or not (raw.startswith('"') and raw.endswith('"')):
        return raw

    body = raw[1:-1]
    decoded = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\" or i + 1 >= len(body):
            decoded += char.encode("utf-8")
            i += 1
            continue
        nxt = body[i + 1]
        octal = body[i + 1 : i + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            decoded.append(int(octal, 8) & 0xFF)
            i += 4
        elif nxt in _C_ESCAPES:
            decoded.append(_C_ESCAPES[nxt])
            i += 2
        else:
            decoded += nxt.encode("utf-8")
            i += 2
    return decoded.decode("utf-8", errors="surrogateescape")


def get_uncommitted_files(directory: Path) -> set[Path]:
    """Return absolute paths of modified, staged, added and untracked files."""
    # Porcelain paths are relative to the work tree root, not to ``directory``.
    top_level = Path(_run_git(["rev-parse", "--show-toplevel"], directory).strip())
    output = _run_git(["status", "--porcelain", "--untracked-files=all"], directory)

    files: set[Path] = set()
    for line in output.splitlines():
        if len(line) < 4:
            continue
        # Format: XY <path> or XY <old> -> <new> for renames
        entry = line[3:]
        if " -> " in entry:
            entry = entry.split(" -> ", 1)[1]
        files.add((top_level / _unquote_status_path(entry)).resolve())
    return files


def is_tracked(file_path: Path, base_dir: Path) -> bool:
    """Return True if git tracks ``file_path``, False if it is untracked.

    Raises:
        OracleUnavailable: If git could not answer (not a repository, no git).
    """
    try:
        _run_git(["ls-files", "--error-unmatch", "--", str(file_path)], base_dir)
    except OracleUnavailable as exc:
        # ls-files exits 1 for an unmatched pathspec; anything else is a failure.
        if exc.returncode == 1:
            return False
        raise
    return True


def blame_file(file_path: Path, base_dir: Path) -> str:
    """Return ``git blame --line-porcelain`` output for ``file_path``."""
    return _run_git(["blame", "--line-porcelain", "--", str(file_path)], base_dir)


def diff_file(file_path: Path, base_dir: Path) -> str:
    """Return the zero-context diff of ``file_path`` against HEAD."""
    return _run_git(
        [
            "diff",
            "--no-ext-diff",
            "--no-color",
            "--unified=0",
            "HEAD",
            "--",
            str(file_path),
        ],
        base_dir,
    )


__all__ = [
    "GitFilterError",
    "GitUser",
    "OracleUnavailable",
    "blame_file",
    "diff_file",
    "get_current_user",
    "get_uncommitted_files",
    "is_git_repository",
    "is_tracked",
]
