"""Report sink for UI test runs."""

from .report_sink import (
    ReportEntry,
    ReportEvent,
    ReportLevel,
    ReportSink,
    TestResultSummary,
)

__all__ = [
    "ReportEntry",
    "ReportEvent",
    "ReportLevel",
    "ReportSink",
    "TestResultSummary",
]
