"""Compressed backup and restore of files before they are rewritten."""

from __future__ import annotations

import logging
import tarfile
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from contract.console import BACKUP_PREFIX

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class BackupError(Exception):
    """Raised when a backup cannot be created or restored."""


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")


def create_backup(
    paths: Sequence[Path],
    base_dir: Path,
    backup_dir: Path | None = None,
) -> Path:
    """Archive ``paths`` into a ``.tar.gz`` stored under ``backup_dir``.

    Members are stored relative to ``base_dir`` so a restore into the same
    directory puts every file back where it was.
    """
    target_dir = backup_dir or Path(tempfile.gettempdir())
    archive = target_dir / f"{BACKUP_PREFIX}{_timestamp()}.tar.gz"
    root = base_dir.resolve()

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive, "w:gz") as tar:
            for path in paths:
                resolved = path.resolve()
                try:
                    arcname = resolved.relative_to(root).as_posix()
                except ValueError as exc:
                    msg = f"{path} is outside {root}"
                    raise BackupError(msg) from exc
                tar.add(resolved, arcname=arcname, recursive=False)
    except (OSError, tarfile.TarError) as exc:
        msg = f"Failed to create backup {archive}: {exc}"
        raise BackupError(msg) from exc

    logger.debug("Backed up %d files to %s", len(paths), archive)
    return archive


def restore_backup(archive: Path, target_dir: Path) -> list[str]:
    """Extract ``archive`` into ``target_dir`` and return the restored members."""
    try:
        with tarfile.open(archive, "r:gz") as tar:
            members = tar.getnames()
            tar.extractall(target_dir, filter="data")
    except (OSError, tarfile.TarError) as exc:
        msg = f"Failed to restore backup {archive}: {exc}"
        raise BackupError(msg) from exc

    logger.debug("Restored %d files from %s", len(members), archive)
    return members


__all__ = ["BackupError", "create_backup", "restore_backup"]
