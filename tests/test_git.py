from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from vcs.git import (
    GitFilterError,
    GitUser,
    OracleUnavailable,
    blame_file,
    diff_file,
    get_current_user,
    get_uncommitted_files,
    is_git_repository,
    is_tracked,
)


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        args=["git"], returncode=returncode, stdout=stdout, stderr=stderr
    )


def test_is_git_repository(tmp_path: Path) -> None:
    with patch("subprocess.run", return_value=_completed(stdout=".git\n")):
        assert is_git_repository(tmp_path) is True

    with patch(
        "subprocess.run",
        return_value=_completed(128, stderr="fatal: not a git repository"),
    ):
        assert is_git_repository(tmp_path) is False


def test_is_git_repository_without_git_binary(tmp_path: Path) -> None:
    with patch("subprocess.run", side_effect=FileNotFoundError("git")):
        assert is_git_repository(tmp_path) is False


def test_get_current_user(tmp_path: Path) -> None:
    with patch(
        "subprocess.run",
        side_effect=[_completed(stdout="me@example.com\n"), _completed(stdout="Me\n")],
    ):
        user = get_current_user(tmp_path)

    assert user == GitUser(email="me@example.com", name="Me")
    assert user.display() == "Me <me@example.com>"


def test_get_current_user_without_name(tmp_path: Path) -> None:
    with patch(
        "subprocess.run",
        side_effect=[_completed(stdout="me@example.com\n"), _completed(1)],
    ):
        user = get_current_user(tmp_path)

    assert user.display() == "<me@example.com>"


@pytest.mark.parametrize("result", [_completed(1), _completed(stdout="\n")])
def test_get_current_user_requires_email(
    tmp_path: Path, result: subprocess.CompletedProcess[str]
) -> None:
    with (
        patch("subprocess.run", return_value=result),
        pytest.raises(GitFilterError, match="user.email"),
    ):
        get_current_user(tmp_path)


def test_get_uncommitted_files(tmp_path: Path) -> None:
    status = (
        " M src/app.js\n"
        "A  src/new.ts\n"
        "?? scratch.js\n"
        "R  old.js -> renamed.js\n"
        '?? "with space.js"\n'
    )
    with patch(
        "subprocess.run",
        side_effect=[_completed(stdout=f"{tmp_path}\n"), _completed(stdout=status)],
    ):
        files = get_uncommitted_files(tmp_path / "src")

    assert files == {
        (tmp_path / "src" / "app.js").resolve(),
        (tmp_path / "src" / "new.ts").resolve(),
        (tmp_path / "scratch.js").resolve(),
        (tmp_path / "renamed.js").resolve(),
        (tmp_path / "with space.js").resolve(),
    }


def test_is_tracked(tmp_path: Path) -> None:
    with patch("subprocess.run", return_value=_completed(stdout="a.js\n")):
        assert is_tracked(tmp_path / "a.js", tmp_path) is True

    with patch(
        "subprocess.run",
        return_value=_completed(1, stderr="error: pathspec 'a.js' did not match"),
    ):
        assert is_tracked(tmp_path / "a.js", tmp_path) is False


def test_is_tracked_raises_when_git_cannot_answer(tmp_path: Path) -> None:
    with (
        patch("subprocess.run", return_value=_completed(128, stderr="fatal")),
        pytest.raises(OracleUnavailable) as excinfo,
    ):
        is_tracked(tmp_path / "a.js", tmp_path)

    assert excinfo.value.returncode == 128


def test_blame_file_uses_line_porcelain(tmp_path: Path) -> None:
    with patch("subprocess.run", return_value=_completed(stdout="out")) as mock_run:
        assert blame_file(tmp_path / "a.js", tmp_path) == "out"

    args = mock_run.call_args[0][0]
    assert args[:3] == ["git", "blame", "--line-porcelain"]
    assert args[-1] == str(tmp_path / "a.js")
    assert mock_run.call_args.kwargs["cwd"] == tmp_path
    assert mock_run.call_args.kwargs["timeout"] == 30


def test_diff_file_requests_zero_context_against_head(tmp_path: Path) -> None:
    with patch("subprocess.run", return_value=_completed(stdout="")) as mock_run:
        diff_file(tmp_path / "a.js", tmp_path)

    args = mock_run.call_args[0][0]
    assert "--unified=0" in args
    assert "HEAD" in args
    assert args[-2:] == ["--", str(tmp_path / "a.js")]


def test_timeout_raises_oracle_unavailable(tmp_path: Path) -> None:
    with (
        patch(
            "subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="git", timeout=30),
        ),
        pytest.raises(OracleUnavailable, match="timed out"),
    ):
        blame_file(tmp_path / "a.js", tmp_path)


def test_nonzero_exit_raises_oracle_unavailable(tmp_path: Path) -> None:
    with (
        patch("subprocess.run", return_value=_completed(128, stderr="fatal: bad revision")),
        pytest.raises(OracleUnavailable, match="bad revision"),
    ):
        diff_file(tmp_path / "a.js", tmp_path)


@pytest.mark.parametrize(
    ("status_line", "expected_name"),
    [
        ('?? "\\303\\251t\\303\\251.js"\n', "été.js"),
        (' M "tab\\there.js"\n', "tab\there.js"),
        ('?? "quote\\"d.js"\n', 'quote"d.js'),
        ('R  "old \\342\\234\\223.js" -> "new \\342\\234\\223.js"\n', "new ✓.js"),
    ],
)
def test_get_uncommitted_files_decodes_quoted_names(
    tmp_path: Path, status_line: str, expected_name: str
) -> None:
    with patch(
        "subprocess.run",
        side_effect=[_completed(stdout=f"{tmp_path}\n"), _completed(stdout=status_line)],
    ):
        files = get_uncommitted_files(tmp_path)

    assert files == {(tmp_path / expected_name).resolve()}
