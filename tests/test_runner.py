from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from removal.models import RemovalSelection
from removal.runner import prepare_selection, process_file, remove_from_files
from vcs.git import GitFilterError, GitUser

LOG_ONLY = RemovalSelection(methods=frozenset({"log"}))


def _write_js_file(root: Path, name: str, content: str) -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_remove_from_files_writes_changes(tmp_path: Path) -> None:
    changed = _write_js_file(tmp_path, "a.js", "console.log(1);\nrun();\n")
    clean = _write_js_file(tmp_path, "b.js", "run();\n")

    run = remove_from_files([changed, clean], LOG_ONLY, base_dir=tmp_path)

    assert run.removed_count == 1
    assert run.changed_files == [changed]
    assert changed.read_text(encoding="utf-8") == "run();\n"
    assert clean.read_text(encoding="utf-8") == "run();\n"


def test_dry_run_leaves_files_untouched(tmp_path: Path) -> None:
    path = _write_js_file(tmp_path, "a.js", "console.log(1);\nrun();\n")

    run = remove_from_files([path], LOG_ONLY, base_dir=tmp_path, dry_run=True)

    assert run.dry_run is True
    assert run.removed_count == 1
    assert run.files[0].outcome is not None
    assert run.files[0].outcome.text == "run();\n"
    assert path.read_text(encoding="utf-8") == "console.log(1);\nrun();\n"


def test_parse_failure_does_not_stop_other_files(tmp_path: Path) -> None:
    broken = _write_js_file(tmp_path, "broken.js", "const = ;\nconsole.log(1);\n")
    good = _write_js_file(tmp_path, "good.js", "console.log(1);\n")

    run = remove_from_files([broken, good], LOG_ONLY, base_dir=tmp_path)

    assert [f.path for f in run.parse_failures] == [broken]
    assert broken.read_text(encoding="utf-8") == "const = ;\nconsole.log(1);\n"
    assert good.read_text(encoding="utf-8") == ""
    assert run.removed_count == 1


def test_write_failure_is_reported(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = _write_js_file(tmp_path, "a.js", "console.log(1);\n")

    def _fail(*_args: object, **_kwargs: object) -> int:
        msg = "read-only file system"
        raise OSError(msg)

    monkeypatch.setattr(Path, "write_text", _fail)
    result = process_file(path, LOG_ONLY)

    assert not result.ok
    assert result.write_error == "read-only file system"
    assert result.outcome is not None


def test_skipped_counts_are_aggregated(tmp_path: Path) -> None:
    a = _write_js_file(tmp_path, "a.js", "console.log(i++);\nconsole.warn(1);\n")
    b = _write_js_file(tmp_path, "b.js", "console.warn(2);\n")

    run = remove_from_files([a, b], LOG_ONLY, base_dir=tmp_path)

    assert run.skipped_counts() == {"side_effect": 1, "method_not_selected": 2}


def test_parallel_run_keeps_input_order(tmp_path: Path) -> None:
    paths = [
        _write_js_file(tmp_path, f"f{i}.js", f"console.log({i});\nkeep({i});\n")
        for i in range(8)
    ]

    run = remove_from_files(paths, LOG_ONLY, base_dir=tmp_path, jobs=4)

    assert [f.path for f in run.files] == paths
    assert run.removed_count == 8
    for i, path in enumerate(paths):
        assert path.read_text(encoding="utf-8") == f"keep({i});\n"


def test_git_filter_outside_repository_fails_before_processing(tmp_path: Path) -> None:
    path = _write_js_file(tmp_path, "a.js", "console.log(1);\n")
    selection = RemovalSelection(methods=frozenset({"log"}), filter_by_uncommitted=True)

    with (
        patch("removal.runner.is_git_repository", return_value=False),
        pytest.raises(GitFilterError),
    ):
        remove_from_files([path], selection, base_dir=tmp_path)

    assert path.read_text(encoding="utf-8") == "console.log(1);\n"


def test_prepare_selection_fills_current_user(tmp_path: Path) -> None:
    selection = RemovalSelection(filter_by_author=True)

    with (
        patch("removal.runner.is_git_repository", return_value=True),
        patch(
            "removal.runner.get_current_user",
            return_value=GitUser(email="me@example.com", name="Me"),
        ),
    ):
        prepared = prepare_selection(selection, tmp_path)

    assert prepared.current_user_email == "me@example.com"
    assert selection.current_user_email is None


def test_prepare_selection_without_git_filters_is_noop(tmp_path: Path) -> None:
    with patch("removal.runner.is_git_repository") as mock_is_repo:
        assert prepare_selection(LOG_ONLY, tmp_path) is LOG_ONLY

    mock_is_repo.assert_not_called()
