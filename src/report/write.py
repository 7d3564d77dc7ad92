"""JSON report writing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from pathlib import Path

    from report.models import ScanReport


def write_report(path: Path, report: ScanReport) -> None:
    """Write ``report`` as indented JSON with sorted keys."""
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(report.to_json_dict(), option=opts))


def load_report(path: Path) -> dict[str, object]:
    """Load a JSON report written by write_report."""
    data = orjson.loads(path.read_bytes())
    if not isinstance(data, dict):
        msg = f"{path}: report must be a JSON object"
        raise ValueError(msg)
    return data


__all__ = ["load_report", "write_report"]
