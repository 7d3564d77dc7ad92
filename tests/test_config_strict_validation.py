from __future__ import annotations

from pathlib import Path

import pytest

from contract.console import DEFAULT_EXTENSIONS, DEFAULT_REMOVAL_METHODS
from rules.config import DEFAULT_EXCLUDES, ConfigError, load_config, merged_excludes


def _write_config(repo_root: Path, toml_content: str) -> None:
    (repo_root / "logsweep.toml").write_text(toml_content, encoding="utf-8")


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.include == []
    assert config.exclude == []
    assert config.extensions == list(DEFAULT_EXTENSIONS)
    assert config.methods == list(DEFAULT_REMOVAL_METHODS)
    assert "error" not in config.methods
    assert config.side_effects == "skip"
    assert config.backup is True
    assert config.jobs == 1


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "bogus_key = true")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_unknown_section_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[semantic]
enabled = true
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "exclude = [")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_unknown_method_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, 'methods = ["log", "shout"]')

    with pytest.raises(ConfigError, match="shout"):
        load_config(tmp_path)


def test_invalid_side_effect_policy_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, 'side_effects = "sometimes"')

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_jobs_must_be_positive(tmp_path: Path) -> None:
    _write_config(tmp_path, "jobs = 0")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_valid_config_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
include = ["src/**"]
exclude = ["vendor"]
extensions = ["js", ".ts"]
methods = ["log", "error"]
side_effects = "remove"
backup = false
backup_dir = ".backups"
jobs = 4
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.include == ["src/**"]
    assert config.exclude == ["vendor"]
    assert config.extensions == [".js", ".ts"]
    assert config.methods == ["log", "error"]
    assert config.side_effects == "remove"
    assert config.backup is False
    assert config.backup_dir == ".backups"
    assert config.jobs == 4


def test_empty_config_accepted(tmp_path: Path) -> None:
    _write_config(tmp_path, "")

    config = load_config(tmp_path)

    assert config.exclude == []
    assert config.respect_gitignore is True
    assert config.nested_gitignore is False


def test_user_excludes_add_to_defaults(tmp_path: Path) -> None:
    _write_config(tmp_path, 'exclude = ["vendor", "dist"]')

    merged = merged_excludes(load_config(tmp_path), ["test"])

    assert merged == [*DEFAULT_EXCLUDES, "vendor", "test"]
