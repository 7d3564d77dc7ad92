"""Scan reports: discovery, aggregation and JSON output."""

from report.models import CallSiteRecord, MethodStats, ScanReport
from report.scan import scan_directory
from report.write import load_report, write_report

__all__ = [
    "CallSiteRecord",
    "MethodStats",
    "ScanReport",
    "load_report",
    "scan_directory",
    "write_report",
]
