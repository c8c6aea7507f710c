"""
In-memory driver for unit tests.

The fake DOM maps locators to lists of FakeElement. Page changes are scripted
against the number of driver calls (`driver.after(n, fn)`), which keeps the
wait tests independent of wall-clock scheduling.
"""

from typing import Callable, Dict, List, Optional

from suites.ui_testing.framework import ElementNotFoundError, StaleElementError


class FakeElement:
    def __init__(self, text: str = "", visible: bool = True, enabled: bool = True):
        self.text = text
        self.visible = visible
        self.enabled = enabled
        self.attached = True

    def __repr__(self):
        return f"FakeElement({self.text!r})"


class FakeDriver:
    def __init__(self):
        self.dom: Dict[object, List[FakeElement]] = {}
        self.calls = 0
        self.find_log: List[object] = []
        self.performed: List[tuple] = []
        self.screenshot_bytes = b"\x89PNG fake"
        self.screenshot_error: Optional[Exception] = None
        self._scheduled: List[tuple] = []

    # Scripting ------------------------------------------------------------

    def set(self, locator, *elements: FakeElement) -> None:
        self.dom[locator] = list(elements)

    def replace(self, locator, *elements: FakeElement) -> None:
        """Detach the current matches and put new ones in their place."""
        for element in self.dom.get(locator, []):
            element.attached = False
        self.set(locator, *elements)

    def after(self, calls: int, action: Callable[[], None]) -> None:
        """Run action once the driver has been called `calls` more times."""
        self._scheduled.append((self.calls + calls, action))

    def _tick(self) -> None:
        self.calls += 1
        due = [item for item in self._scheduled if item[0] <= self.calls]
        for item in due:
            self._scheduled.remove(item)
            item[1]()

    # Driver capability ----------------------------------------------------

    def find_element(self, locator):
        self._tick()
        self.find_log.append(locator)
        matches = self.dom.get(locator)
        if not matches:
            raise ElementNotFoundError(f"No element matches locator: {locator}")
        return matches[0]

    def find_elements(self, locator):
        self._tick()
        self.find_log.append(locator)
        return list(self.dom.get(locator, []))

    def is_visible(self, handle):
        self._tick()
        if not handle.attached:
            raise StaleElementError("detached")
        return handle.visible

    def is_enabled(self, handle):
        self._tick()
        if not handle.attached:
            raise StaleElementError("detached")
        return handle.enabled

    def is_attached(self, handle):
        self._tick()
        return handle.attached

    def get_text(self, handle):
        return handle.text

    def capture_screenshot(self):
        if self.screenshot_error is not None:
            raise self.screenshot_error
        return self.screenshot_bytes

    def perform_actions(self, steps):
        self.performed.extend((s.name, s.handle, s.args) for s in steps)

    def select_option(self, handle, value=None, label=None, index=None):
        return [value or label or str(index)]


