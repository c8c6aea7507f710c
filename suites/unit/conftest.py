import pytest

from suites.ui_testing.framework import UiUtilities, WaitSpec
from suites.unit.fakes import FakeDriver
from webui_tools.common import ConfigLoader
from webui_tools.report_tools import ReportSink


@pytest.fixture(autouse=True)
def _fresh_config():
    """Tests that point ConfigLoader at a temp file must not leak it."""
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fast_spec() -> WaitSpec:
    return WaitSpec(timeout=0.3, poll_interval=0.01)


@pytest.fixture
def ui(fake_driver: FakeDriver, fast_spec: WaitSpec) -> UiUtilities:
    return UiUtilities(fake_driver, fast_spec)


@pytest.fixture
def sink(tmp_path) -> ReportSink:
    return ReportSink(tmp_path / "reports" / "run-report.json")
