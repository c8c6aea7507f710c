"""
================================================================================
Report Sink
================================================================================

Append-only, in-memory log of test outcomes and artifacts for one test run.

Features:
- One ReportEntry per test, created by the lifecycle recorder
- Buffered log / failure / image events (nothing touches disk until flush)
- Single JSON flush at the end of the run, with a result summary
- Screenshots mirrored into the Allure report when an Allure test is active

================================================================================
"""

import json
import threading
import traceback
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Union

import allure
from loguru import logger


class ReportLevel(str, Enum):
    """Severity of a report event."""
    INFO = "info"
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    WARNING = "warning"


# ================================================================================
# Data Models
# ================================================================================

@dataclass
class ReportEvent:
    """Single log line of a report entry."""
    level: ReportLevel
    message: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass
class ReportEntry:
    """
    Report handle for one test.

    Only the thread running the test writes to its entry.
    """
    name: str
    thread: str = field(default_factory=lambda: threading.current_thread().name)
    status: str = "pending"
    events: List[ReportEvent] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["events"] = [
            {"level": e.level.value, "message": e.message, "timestamp": e.timestamp}
            for e in self.events
        ]
        return data


@dataclass
class TestResultSummary:
    """Summary of test execution results."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    pending: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    __test__ = False

    @property
    def pass_rate(self) -> float:
        """Calculate pass rate percentage."""
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "pending": self.pending,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "timestamp": self.timestamp,
        }


# ================================================================================
# Sink
# ================================================================================

class ReportSink:
    """
    Shared report for a whole run.

    Usage:
        sink = ReportSink(Path("reports/run-report.json"))
        entry = sink.create_entry("test_login")
        sink.log(entry, ReportLevel.PASS, "Test has passed")
        sink.flush()
    """

    def __init__(self, output_path: Union[str, Path]):
        """
        Args:
            output_path: JSON file written by flush()
        """
        self.output_path = Path(output_path)
        self._entries: List[ReportEntry] = []
        self._lock = threading.Lock()
        self.flush_count = 0

    @property
    def entries(self) -> List[ReportEntry]:
        with self._lock:
            return list(self._entries)

    def create_entry(self, name: str) -> ReportEntry:
        """Create and register a new entry named after a test."""
        entry = ReportEntry(name=name)
        with self._lock:
            self._entries.append(entry)
        logger.debug(f"Report entry created: {name}")
        return entry

    def log(self, entry: ReportEntry, level: ReportLevel, message: str) -> None:
        """Append a message to an entry."""
        entry.events.append(ReportEvent(level=ReportLevel(level), message=message))
        if level == ReportLevel.PASS:
            entry.status = "passed"
        elif level == ReportLevel.SKIP:
            entry.status = "skipped"

    def fail(self, entry: ReportEntry, error: BaseException) -> None:
        """Record a failure with type, message and stack."""
        stack = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        message = f"{type(error).__name__}: {error}\n{stack}".rstrip()
        entry.events.append(ReportEvent(level=ReportLevel.FAIL, message=message))
        entry.status = "failed"

    def attach_image(self, entry: ReportEntry, path: Union[str, Path]) -> None:
        """
        Attach a screenshot to an entry.

        The image is mirrored into the Allure results as well. Allure only
        records it while an Allure test is running; a failing mirror is logged
        and the entry keeps the image.
        """
        entry.images.append(str(path))
        try:
            allure.attach.file(
                str(path),
                name=f"{entry.name}_screenshot",
                attachment_type=allure.attachment_type.PNG,
            )
        except Exception as e:
            logger.warning(f"Could not mirror {path} into Allure: {e}")

    def summary(self) -> TestResultSummary:
        summary = TestResultSummary()
        for entry in self.entries:
            summary.total += 1
            if entry.status == "passed":
                summary.passed += 1
            elif entry.status == "failed":
                summary.failed += 1
            elif entry.status == "skipped":
                summary.skipped += 1
            else:
                summary.pending += 1
        return summary

    def flush(self) -> Path:
        """
        Write the whole report to disk.

        Returns:
            Path of the written JSON report
        """
        document = {
            "summary": self.summary().to_dict(),
            "entries": [entry.to_dict() for entry in self.entries],
        }
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.output_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, default=str)
        self.flush_count += 1

        if self.flush_count > 1:
            logger.warning(f"Report rewritten (flush #{self.flush_count}): {self.output_path}")
        else:
            logger.info(f"Report written: {self.output_path}")
        return self.output_path


__all__ = [
    "ReportEntry",
    "ReportEvent",
    "ReportLevel",
    "ReportSink",
    "TestResultSummary",
]
