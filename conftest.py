"""
Repository-level pytest configuration.

Why this exists:
  - Provide safe defaults for local runs (headless Chromium)
  - Register the lifecycle report plugin when asked for (--lifecycle-report)
  - Make pytester available to the plugin's own tests
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from webui_tools.common import init_logger


pytest_plugins = ["pytester"]


def pytest_addoption(parser):
    group = parser.getgroup("lifecycle", "UI lifecycle report")
    group.addoption(
        "--lifecycle-report",
        action="store_true",
        default=False,
        help="Record test outcomes in reports/run-report.json and capture failure screenshots",
    )


def pytest_configure(config):
    init_logger()

    if not config.getoption("--lifecycle-report"):
        return

    # Under xdist only workers run tests; the controller would flush an empty report
    is_controller = not hasattr(config, "workerinput") and getattr(config.option, "numprocesses", None)
    if is_controller:
        return

    from suites.ui_testing.framework.listeners import LifecycleListener

    config.pluginmanager.register(
        LifecycleListener(working_dir=config.rootpath),
        "lifecycle-listener",
    )


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _safe_env_defaults() -> Generator[None, None, None]:
    """Set local-run defaults if not already provided by the user/CI."""
    defaults = {
        "UI_BROWSER": "chromium",
        "UI_HEADLESS": "true",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
