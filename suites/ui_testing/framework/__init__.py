"""
================================================================================
UI Testing Framework
================================================================================

Synchronization and lifecycle support for browser UI tests.

Components:
    - driver: Locator value and driver capability (Playwright adapter)
    - ui_utilities: Explicit-wait engine and element helpers
    - listeners: Test lifecycle recorder and its pytest plugin
    - data_utils: Fixture record loading and date formatting
    - exceptions: Error taxonomy

Author: Automation Team
License: MIT
================================================================================
"""

from .data_utils import current_date, load_records
from .driver import ActionStep, Driver, Locator, PlaywrightDriver, as_driver
from .exceptions import (
    CaptureError,
    ElementNotFoundError,
    ResolutionError,
    StaleElementError,
    UiSupportError,
    WaitTimeoutError,
)
from .listeners import (
    LifecycleListener,
    Listeners,
    TestExecutionRecord,
    TestLifecycleRecorder,
    TestOutcome,
)
from .ui_utilities import (
    ActionChain,
    UiUtilities,
    WaitEngine,
    WaitSpec,
    capture_screenshot,
)

__all__ = [
    "ActionChain",
    "ActionStep",
    "CaptureError",
    "Driver",
    "ElementNotFoundError",
    "LifecycleListener",
    "Listeners",
    "Locator",
    "PlaywrightDriver",
    "ResolutionError",
    "StaleElementError",
    "TestExecutionRecord",
    "TestLifecycleRecorder",
    "TestOutcome",
    "UiSupportError",
    "UiUtilities",
    "WaitEngine",
    "WaitSpec",
    "WaitTimeoutError",
    "as_driver",
    "capture_screenshot",
    "current_date",
    "load_records",
]
