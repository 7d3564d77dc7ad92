from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from contract.console import (
    CONSOLE_METHOD_SET,
    DEFAULT_EXTENSIONS,
    DEFAULT_REMOVAL_METHODS,
)

CONFIG_FILENAME = "logsweep.toml"

DEFAULT_EXCLUDES: tuple[str, ...] = ("node_modules", ".git", "dist", "build", "*.min.js")

SideEffectsSetting = Literal["skip", "remove"]


class LogSweepConfig(BaseModel):
    """Configuration for console call scanning and removal."""

    model_config = ConfigDict(extra="forbid")

    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all source files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description=(
            "Glob patterns or directory names to exclude, on top of DEFAULT_EXCLUDES"
        ),
    )
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="File suffixes to scan",
    )
    methods: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REMOVAL_METHODS),
        description="Console methods selected for removal by default",
    )
    side_effects: SideEffectsSetting = Field(
        default="skip",
        description="Handling of calls whose arguments may have side effects",
    )
    backup: bool = Field(
        default=True,
        description="Create a compressed backup before rewriting files",
    )
    backup_dir: str | None = Field(
        default=None,
        description="Directory for backups (default: system temp dir)",
    )
    respect_gitignore: bool = Field(
        default=True,
        description="Skip files ignored by .gitignore",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    jobs: int = Field(
        default=1,
        ge=1,
        description="Number of files processed concurrently during removal",
    )

    @field_validator("methods", mode="before")
    @classmethod
    def validate_methods(cls, v: Any) -> Any:
        """Validate that every configured method is a recognised console method."""
        if v is None:
            return list(DEFAULT_REMOVAL_METHODS)

        if not isinstance(v, list) or not all(isinstance(m, str) for m in v):
            msg = "methods must be a list of console method names"
            raise TypeError(msg)

        unknown = sorted(set(v) - CONSOLE_METHOD_SET)
        if unknown:
            msg = (
                f"Unknown console methods: {', '.join(unknown)}. "
                f"Valid methods: {', '.join(sorted(CONSOLE_METHOD_SET))}"
            )
            raise ValueError(msg)

        return v

    @field_validator("extensions", mode="after")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in v]


def merged_excludes(
    config: LogSweepConfig, extra: list[str] | None = None
) -> list[str]:
    """Return DEFAULT_EXCLUDES followed by config and command-line excludes.

    The defaults always apply; user patterns only add to them.
    """
    merged = list(DEFAULT_EXCLUDES)
    for pattern in [*config.exclude, *(extra or [])]:
        if pattern not in merged:
            merged.append(pattern)
    return merged


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> LogSweepConfig:
    """Load configuration from logsweep.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return LogSweepConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return LogSweepConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
