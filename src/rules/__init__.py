"""Configuration rules for log-sweep."""

from rules.config import (
    CONFIG_FILENAME,
    DEFAULT_EXCLUDES,
    ConfigError,
    LogSweepConfig,
    load_config,
    merged_excludes,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_EXCLUDES",
    "ConfigError",
    "LogSweepConfig",
    "load_config",
    "merged_excludes",
]
