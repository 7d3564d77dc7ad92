"""Report models for console call-site scans."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from contract.console import CONSOLE_METHODS


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CallSiteRecord(_ReportModel):
    """Schema for one call site in a scan report."""

    method: str
    line: int
    column: int
    end_line: int
    end_column: int
    code: str
    has_side_effects: bool


class MethodStats(_ReportModel):
    """Occurrence count and containing files for one console method."""

    count: int = 0
    files: list[str] = Field(default_factory=list)


def _empty_method_stats() -> dict[str, MethodStats]:
    return {method: MethodStats() for method in CONSOLE_METHODS}


class ScanReport(_ReportModel):
    """Aggregate scan result, serialised as the JSON report."""

    total_count: int = 0
    file_count: int = 0
    by_method: dict[str, MethodStats] = Field(default_factory=_empty_method_stats)
    by_file: dict[str, list[CallSiteRecord]] = Field(default_factory=dict)
    git_filtered: bool = False
    git_filter_info: str | None = None
    parse_errors: dict[str, str] = Field(default_factory=dict)

    def add_file(self, path: str, records: list[CallSiteRecord]) -> None:
        """Record the call sites found in one file (no-op when empty)."""
        if not records:
            return
        self.by_file[path] = sorted(records, key=lambda r: (r.line, r.column))
        self.file_count += 1
        self.total_count += len(records)
        for record in records:
            stats = self.by_method.setdefault(record.method, MethodStats())
            stats.count += 1
            if path not in stats.files:
                stats.files.append(path)

    def side_effect_sites(self) -> list[tuple[str, CallSiteRecord]]:
        return [
            (path, record)
            for path, records in self.by_file.items()
            for record in records
            if record.has_side_effects
        ]

    def to_json_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


__all__ = ["CallSiteRecord", "MethodStats", "ScanReport"]
