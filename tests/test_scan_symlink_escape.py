from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

import scan.files as scan_files
from scan.files import _build_gitignore_matcher, find_source_files

if TYPE_CHECKING:
    from pathlib import Path


def _relative(repo_root: Path, **kwargs: object) -> list[str]:
    return [
        path.relative_to(repo_root).as_posix()
        for path in find_source_files(repo_root, **kwargs)  # type: ignore[arg-type]
    ]


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_find_source_files_skips_symlinked_dirs(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    (repo_root / "src").mkdir()
    (repo_root / "src" / "app.js").write_text("console.log('ok');\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "leak.js").write_text("console.log('leak');\n", encoding="utf-8")

    symlink_dir = repo_root / "linked"
    symlink_dir.symlink_to(external_root, target_is_directory=True)

    results = _relative(repo_root)

    assert "src/app.js" in results
    assert "linked/leak.js" not in results


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    (repo_root / "src").mkdir()
    (repo_root / "src" / "app.js").write_text("console.log('ok');\n", encoding="utf-8")
    (repo_root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "outside.gitignore").write_text("src/app.js\n", encoding="utf-8")

    symlink_gitignore = repo_root / "linked.gitignore"
    symlink_gitignore.symlink_to(external_root / "outside.gitignore")

    matcher = _build_gitignore_matcher(repo_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(repo_root / "src" / "app.js")) is False


def test_find_source_files_filters_by_extension_and_sorts(tmp_path: Path) -> None:
    for name in ("b.ts", "a.js", "c.tsx", "d.mjs", "notes.md", "style.css"):
        (tmp_path / name).write_text("", encoding="utf-8")

    assert _relative(tmp_path) == ["a.js", "b.ts", "c.tsx", "d.mjs"]
    assert _relative(tmp_path, extensions=[".ts"]) == ["b.ts"]


def test_find_source_files_applies_excludes(tmp_path: Path) -> None:
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text("", encoding="utf-8")
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist" / "bundle.js").write_text("", encoding="utf-8")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.js").write_text("", encoding="utf-8")
    (tmp_path / "src" / "app.min.js").write_text("", encoding="utf-8")
    (tmp_path / "src" / "legacy").mkdir()
    (tmp_path / "src" / "legacy" / "old.js").write_text("", encoding="utf-8")

    results = _relative(
        tmp_path,
        exclude_patterns=["node_modules", "dist", "*.min.js", "src/legacy/*"],
    )

    assert results == ["src/app.js"]


def test_find_source_files_applies_include_patterns(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.js").write_text("", encoding="utf-8")
    (tmp_path / "scripts").mkdir()
    (tmp_path / "scripts" / "build.js").write_text("", encoding="utf-8")

    assert _relative(tmp_path, include_patterns=["src/*"]) == ["src/app.js"]


def test_find_source_files_respects_root_gitignore(tmp_path: Path) -> None:
    (tmp_path / ".gitignore").write_text("generated/\n", encoding="utf-8")
    (tmp_path / "generated").mkdir()
    (tmp_path / "generated" / "out.js").write_text("", encoding="utf-8")
    (tmp_path / "app.js").write_text("", encoding="utf-8")

    assert _relative(tmp_path) == ["app.js"]
    assert _relative(tmp_path, respect_gitignore=False) == ["app.js", "generated/out.js"]


def test_find_source_files_does_not_descend_into_excluded_dirs(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "node_modules" / "pkg" / "lib").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "lib" / "index.js").write_text(
        "", encoding="utf-8"
    )
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.js").write_text("", encoding="utf-8")

    checked: list[str] = []
    original = scan_files._should_include_file

    def recording(path: Path, directory: Path, *args: object) -> bool:
        checked.append(path.relative_to(directory).as_posix())
        return original(path, directory, *args)  # type: ignore[arg-type]

    monkeypatch.setattr(scan_files, "_should_include_file", recording)

    assert _relative(tmp_path, exclude_patterns=["node_modules"]) == ["src/app.js"]
    assert checked == ["src/app.js"]
