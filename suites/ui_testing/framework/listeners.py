"""
================================================================================
Test Lifecycle Recorder
================================================================================

Records the outcome of every test in the shared run report and captures a
screenshot when a test fails.

Components:
    - TestLifecycleRecorder: per-test state machine, keyed by execution context
    - LifecycleListener: pytest plugin feeding runner events to the recorder

Each test goes PENDING -> PASSED | FAILED | SKIPPED. Records live in a map
keyed by the id of the thread running the test, so concurrently running tests
never see each other's record or report entry. Nothing is written to disk
until on_finish() flushes the report, apart from failure screenshots.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Optional, Union

import allure
import pytest
from loguru import logger

from webui_tools.common import get_config
from webui_tools.report_tools import ReportEntry, ReportLevel, ReportSink

from .driver import Driver, as_driver
from .exceptions import CaptureError, ResolutionError
from .ui_utilities import capture_screenshot


class TestOutcome(str, Enum):
    """Lifecycle state of one test."""
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"

    __test__ = False

    @property
    def is_terminal(self) -> bool:
        return self is not TestOutcome.PENDING


@dataclass
class TestExecutionRecord:
    """
    State of one test invocation.

    Attributes:
        test_name: Test method name
        entry: Report entry of this test
        outcome: Current lifecycle state
        driver: Driver resolved on failure (if any)
        screenshot_path: Failure screenshot (if captured)
    """
    test_name: str
    entry: ReportEntry
    outcome: TestOutcome = TestOutcome.PENDING
    driver: Optional[Driver] = None
    screenshot_path: Optional[Path] = None

    __test__ = False


DriverProvider = Callable[[], Any]


class TestLifecycleRecorder:
    """
    Observes test start / success / failure / skip events.

    Usage:
        recorder = TestLifecycleRecorder(ReportSink("reports/run-report.json"))
        recorder.on_test_start("test_login")
        recorder.on_test_failure("test_login", error, driver_provider=lambda: driver)
        recorder.on_finish()
    """

    __test__ = False

    def __init__(
        self,
        sink: ReportSink,
        working_dir: Optional[Union[str, Path]] = None,
        context_key: Callable[[], Hashable] = threading.get_ident,
    ):
        """
        Args:
            sink: Shared report sink of the run
            working_dir: Root under which reports/<test>.png is written
            context_key: Identity of the current execution context
        """
        self.sink = sink
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self._context_key = context_key
        self._records: Dict[Hashable, TestExecutionRecord] = {}
        self._last_driver: Dict[Hashable, Driver] = {}
        self._finished = False

    def current_record(self) -> Optional[TestExecutionRecord]:
        """Record of the calling execution context."""
        return self._records.get(self._context_key())

    # =========================================================================
    # Runner Events
    # =========================================================================

    def on_test_start(self, test_id: str) -> TestExecutionRecord:
        entry = self.sink.create_entry(test_id)
        record = TestExecutionRecord(test_name=test_id, entry=entry)
        self._records[self._context_key()] = record
        logger.info(f"▶ Test started: {test_id}")
        return record

    def on_test_success(self, test_id: str) -> None:
        record = self._transition(test_id, TestOutcome.PASSED)
        if record is None:
            return
        self.sink.log(record.entry, ReportLevel.PASS, "Test has passed")
        logger.info(f"✅ Test passed: {test_id}")

    def on_test_failure(
        self,
        test_id: str,
        error: BaseException,
        driver_provider: Optional[DriverProvider] = None,
    ) -> None:
        """
        Record a failure, then try to attach a screenshot.

        The driver comes from driver_provider. When it cannot be obtained the
        last driver seen in this context is used. Capture problems are logged
        on the entry and never replace the recorded failure.
        """
        record = self._transition(test_id, TestOutcome.FAILED)
        if record is None:
            return
        self.sink.fail(record.entry, error)
        logger.error(f"❌ Test failed: {test_id}: {type(error).__name__}: {error}")

        key = self._context_key()
        try:
            record.driver = self._resolve_driver(driver_provider)
            self._last_driver[key] = record.driver
        except ResolutionError as e:
            logger.warning(f"Could not resolve driver for {test_id}: {e}")
            self.sink.log(record.entry, ReportLevel.WARNING, f"Driver resolution failed: {e}")
            record.driver = self._last_driver.get(key)

        if record.driver is None:
            logger.warning(f"No driver available, skipping screenshot for {test_id}")
            return

        try:
            path = capture_screenshot(record.driver, test_id, self.working_dir)
        except CaptureError as e:
            logger.warning(f"Screenshot capture abandoned for {test_id}: {e}")
            self.sink.log(record.entry, ReportLevel.WARNING, f"Screenshot capture failed: {e}")
            return

        record.screenshot_path = path
        self.sink.attach_image(record.entry, path)

    def on_test_skipped(self, test_id: str, reason: Optional[str] = None) -> None:
        record = self._transition(test_id, TestOutcome.SKIPPED)
        if record is None:
            return
        self.sink.log(record.entry, ReportLevel.SKIP, reason or "Test was skipped")
        logger.info(f"⏭️ Test skipped: {test_id}")

    def on_finish(self) -> Optional[Path]:
        """Flush the report sink. Only the first call writes."""
        if self._finished:
            logger.warning("Run already finished, report not flushed again")
            return None
        self._finished = True
        return self.sink.flush()

    # =========================================================================
    # Internals
    # =========================================================================

    def _transition(self, test_id: str, outcome: TestOutcome) -> Optional[TestExecutionRecord]:
        record = self._records.get(self._context_key())
        if record is None or record.test_name != test_id:
            logger.warning(f"No active record for {test_id}, ignoring {outcome.value} event")
            return None
        if record.outcome.is_terminal:
            logger.warning(
                f"{test_id} already {record.outcome.value}, ignoring {outcome.value} event"
            )
            return None
        record.outcome = outcome
        return record

    @staticmethod
    def _resolve_driver(driver_provider: Optional[DriverProvider]) -> Driver:
        if driver_provider is None:
            raise ResolutionError("No driver provider supplied with the failure event")
        try:
            return as_driver(driver_provider())
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(f"Driver provider raised {type(e).__name__}: {e}") from e


# Component name used throughout the docs
Listeners = TestLifecycleRecorder


# ================================================================================
# Pytest Plugin
# ================================================================================

DEFAULT_DRIVER_FIXTURES = ("driver", "page")


def default_report_path(working_dir: Path) -> Path:
    """reports/run-report.json, one file per xdist worker."""
    reports_dir = working_dir / get_config("reports.dir", "reports")
    file_name = get_config("reports.file", "run-report.json")
    worker = os.environ.get("PYTEST_XDIST_WORKER")
    if worker:
        name = Path(file_name)
        file_name = f"{name.stem}-{worker}{name.suffix}"
    return reports_dir / file_name


class LifecycleListener:
    """
    Pytest plugin mapping test events onto a TestLifecycleRecorder.

    The failing test's driver is taken from its fixtures (first of
    driver_fixtures present in the test's arguments).

    Registered by conftest.py when pytest runs with --lifecycle-report.
    """

    def __init__(
        self,
        recorder: Optional[TestLifecycleRecorder] = None,
        working_dir: Optional[Union[str, Path]] = None,
        driver_fixtures: tuple = DEFAULT_DRIVER_FIXTURES,
    ):
        working_dir = Path(working_dir) if working_dir else Path.cwd()
        if recorder is None:
            recorder = TestLifecycleRecorder(
                ReportSink(default_report_path(working_dir)),
                working_dir=working_dir,
            )
        self.recorder = recorder
        self.driver_fixtures = driver_fixtures

    @pytest.hookimpl(hookwrapper=True)
    def pytest_runtest_protocol(self, item, nextitem):
        self.recorder.on_test_start(item.name)
        yield

    @pytest.hookimpl(hookwrapper=True)
    def pytest_runtest_makereport(self, item, call):
        outcome = yield
        report = outcome.get_result()

        record = self.recorder.current_record()
        if record is None or record.outcome.is_terminal:
            return

        if report.skipped:
            self.recorder.on_test_skipped(item.name, reason=self._skip_reason(call))
        elif report.failed:
            # strict xpass fails without an exception
            if call.excinfo is not None:
                error = call.excinfo.value
            else:
                error = AssertionError(report.longreprtext or "Test failed")
            with allure.step("Capture failure details"):
                self.recorder.on_test_failure(
                    item.name,
                    error,
                    driver_provider=lambda: self._driver_from_fixtures(item),
                )
        elif report.when == "call":
            self.recorder.on_test_success(item.name)

    def pytest_sessionfinish(self, session, exitstatus):
        self.recorder.on_finish()

    def _driver_from_fixtures(self, item) -> Any:
        funcargs = getattr(item, "funcargs", {})
        for name in self.driver_fixtures:
            if name in funcargs:
                return funcargs[name]
        raise ResolutionError(
            f"Test {item.name} uses none of the driver fixtures: "
            f"{', '.join(self.driver_fixtures)}"
        )

    @staticmethod
    def _skip_reason(call) -> Optional[str]:
        if call.excinfo is None:
            return None
        return str(call.excinfo.value) or None


__all__ = [
    "LifecycleListener",
    "Listeners",
    "TestExecutionRecord",
    "TestLifecycleRecorder",
    "TestOutcome",
    "default_report_path",
]
