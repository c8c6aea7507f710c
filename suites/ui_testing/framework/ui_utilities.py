# ================================================================================
# UI Utilities Module
# ================================================================================
#
# Explicit waits and element helpers for browser UI tests.
#
# Every wait blocks the calling test thread in a fixed-interval poll loop until
# its condition holds or the timeout elapses. Timeouts, missing elements and
# stale handles propagate to the test as typed errors; nothing is retried
# beyond the poll loop itself.
#
# Key Features:
#   - Visibility / presence / staleness / clickability / invisibility waits
#   - Stale-then-visible wait for elements replaced after an action
#   - Either/or fallback wait (two sequential, independent timeout windows)
#   - Snapshot listing of matches and table column resolution
#   - Action chains, dropdown selection, failure screenshots
#   - Allure step integration
#
# Usage:
#   ui = UiUtilities(PlaywrightDriver(page))
#   button = ui.wait_for_visible(Locator.test_id("btn-save"))
#   ui.actions().click(button).perform()
#   ui.wait_for_stale_then_visible(Locator.css("table.results"))
#
# ================================================================================

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar, Union

import allure
from loguru import logger

from webui_tools.common import get_config

from .driver import ActionStep, Driver, Locator
from .exceptions import (
    CaptureError,
    ElementNotFoundError,
    StaleElementError,
    WaitTimeoutError,
)


T = TypeVar('T')

DEFAULT_TIMEOUT = 25.0
DEFAULT_POLL_INTERVAL = 0.5


@dataclass(frozen=True)
class WaitSpec:
    """
    Timeout budget of a wait.

    Attributes:
        timeout: Total timeout in seconds
        poll_interval: Delay between two condition checks in seconds
    """
    timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"Wait timeout must be positive, got {self.timeout}")
        if self.poll_interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.poll_interval}")

    @classmethod
    def from_config(cls) -> "WaitSpec":
        """Build the default spec from wait.timeout / wait.poll_interval."""
        return cls(
            timeout=float(get_config("wait.timeout", DEFAULT_TIMEOUT)),
            poll_interval=float(get_config("wait.poll_interval", DEFAULT_POLL_INTERVAL)),
        )

    def with_timeout(self, timeout: Optional[float]) -> "WaitSpec":
        if timeout is None:
            return self
        return WaitSpec(timeout=timeout, poll_interval=self.poll_interval)


def poll_until(
    condition: Callable[[], T],
    spec: WaitSpec,
    description: str,
    ignored: Tuple[Type[BaseException], ...] = (),
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Evaluate a condition until it returns a truthy value.

    Args:
        condition: Zero-argument check; its truthy result is returned
        spec: Timeout and poll interval
        description: Human-readable description for logging
        ignored: Error types treated as "condition not met yet"
        clock: Monotonic clock in seconds
        sleep: Sleep function

    Returns:
        The first truthy result of condition

    Raises:
        WaitTimeoutError: If the timeout elapsed without success. Never
            raised before the full timeout has passed.
    """
    start = clock()
    deadline = start + spec.timeout
    attempt = 0
    last_error: Optional[BaseException] = None

    while True:
        attempt += 1
        try:
            result = condition()
            if result:
                logger.debug(
                    f"Wait successful after {attempt} attempts "
                    f"({clock() - start:.2f}s): {description}"
                )
                return result
        except ignored as e:
            last_error = e

        now = clock()
        if now >= deadline:
            error_msg = (
                f"Timeout after {now - start:.1f}s ({attempt} attempts) "
                f"waiting for: {description}"
            )
            if last_error is not None:
                error_msg += f". Last error: {last_error}"
            logger.error(error_msg)
            raise WaitTimeoutError(error_msg) from last_error

        sleep(min(spec.poll_interval, deadline - now))


class ActionChain:
    """
    Fluent builder for a sequence of user interactions.

    Steps are only dispatched to the driver on perform().

    Example:
        ui.actions().hover(menu).click(item).perform()
    """

    def __init__(self, driver: Driver):
        self._driver = driver
        self._steps: List[ActionStep] = []

    @property
    def steps(self) -> Tuple[ActionStep, ...]:
        return tuple(self._steps)

    def click(self, handle: Any) -> "ActionChain":
        self._steps.append(ActionStep("click", handle))
        return self

    def double_click(self, handle: Any) -> "ActionChain":
        self._steps.append(ActionStep("double_click", handle))
        return self

    def hover(self, handle: Any) -> "ActionChain":
        self._steps.append(ActionStep("hover", handle))
        return self

    def fill(self, handle: Any, text: str) -> "ActionChain":
        self._steps.append(ActionStep("fill", handle, (text,)))
        return self

    def press(self, handle: Any, key: str) -> "ActionChain":
        self._steps.append(ActionStep("press", handle, (key,)))
        return self

    def perform(self) -> None:
        steps = self.steps
        with allure.step(f"Perform actions: {', '.join(s.name for s in steps)}"):
            self._driver.perform_actions(steps)
        self._steps.clear()


class UiUtilities:
    """
    Explicit-wait engine bound to one browser session.

    One instance per test thread; the driver must not be shared between
    concurrently running tests.

    Example:
        ui = UiUtilities(driver)
        ui.wait_for_visible(Locator.css("#login"))
        index = ui.resolve_column_index("Email", Locator.css("table th"))
    """

    def __init__(
        self,
        driver: Driver,
        wait_spec: Optional[WaitSpec] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            driver: Browser session capability
            wait_spec: Default timeout budget (wait.* configuration if None)
            clock: Monotonic clock used by the poll loop
            sleep: Sleep function used by the poll loop
        """
        self.driver = driver
        self.wait_spec = wait_spec or WaitSpec.from_config()
        self._clock = clock
        self._sleep = sleep

    def _until(
        self,
        condition: Callable[[], T],
        description: str,
        timeout: Optional[float] = None,
        ignored: Tuple[Type[BaseException], ...] = (),
    ) -> T:
        return poll_until(
            condition,
            self.wait_spec.with_timeout(timeout),
            description,
            ignored=ignored,
            clock=self._clock,
            sleep=self._sleep,
        )

    # =========================================================================
    # Waits
    # =========================================================================

    @allure.step("Wait for visible: {locator}")
    def wait_for_visible(self, locator: Locator, timeout: Optional[float] = None) -> Any:
        """
        Wait until an element matching the locator exists and is visible.

        Returns:
            The visible element handle

        Raises:
            WaitTimeoutError: If no visible match appeared in time
        """
        def visible_match():
            handle = self.driver.find_element(locator)
            return handle if self.driver.is_visible(handle) else None

        return self._until(
            visible_match,
            f"{locator} to be visible",
            timeout,
            ignored=(ElementNotFoundError, StaleElementError),
        )

    @allure.step("Wait for element to be visible")
    def wait_for_element_visible(self, handle: Any, timeout: Optional[float] = None) -> Any:
        """
        Wait until an already located element is visible.

        Raises:
            WaitTimeoutError: If the element stayed hidden
            StaleElementError: If the element was detached while waiting
        """
        return self._until(
            lambda: handle if self.driver.is_visible(handle) else None,
            "held element to be visible",
            timeout,
        )

    @allure.step("Wait for element to become stale")
    def wait_for_stale(self, handle: Any, timeout: Optional[float] = None) -> None:
        """Wait until the element is no longer attached to the document."""
        self._until(
            lambda: not self.driver.is_attached(handle),
            "held element to become stale",
            timeout,
        )

    @allure.step("Wait for {locator} to be replaced")
    def wait_for_stale_then_visible(
        self,
        locator: Locator,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Wait for the current match of a locator to be replaced by a new visible one.

        Use after an action that re-renders the element (page transitions,
        table refreshes).

        Raises:
            ElementNotFoundError: Immediately, if nothing matches at call time
            WaitTimeoutError: From the stale phase or from the visible phase
        """
        current = self.driver.find_element(locator)

        try:
            self.wait_for_stale(current, timeout)
        except WaitTimeoutError as e:
            raise WaitTimeoutError(
                f"Stale phase: {locator} was never detached. {e}"
            ) from e

        try:
            return self.wait_for_visible(locator, timeout)
        except WaitTimeoutError as e:
            raise WaitTimeoutError(
                f"Visible phase: replacement for {locator} never became visible. {e}"
            ) from e

    @allure.step("Wait for {locator_a} or {locator_b}")
    def wait_for_either_visible(
        self,
        locator_a: Locator,
        locator_b: Locator,
        timeout: Optional[float] = None,
        fallback_timeout: Optional[float] = None,
    ) -> Any:
        """
        Wait for locator_a, falling back to locator_b.

        locator_b is only tried after locator_a failed for any reason, with a
        fresh timeout window. Worst-case latency is the sum of both windows.

        Args:
            locator_a: Preferred locator
            locator_b: Fallback locator
            timeout: Window for locator_a
            fallback_timeout: Window for locator_b (defaults to timeout)
        """
        try:
            return self.wait_for_visible(locator_a, timeout)
        except Exception as e:
            logger.warning(
                f"⚠️ {locator_a} not visible ({type(e).__name__}), "
                f"falling back to {locator_b}"
            )

        if fallback_timeout is None:
            fallback_timeout = timeout
        return self.wait_for_visible(locator_b, fallback_timeout)

    @allure.step("Wait for element to be clickable")
    def wait_for_clickable(self, handle: Any, timeout: Optional[float] = None) -> Any:
        """Wait until the element is visible and enabled."""
        return self._until(
            lambda: handle if self.driver.is_visible(handle) and self.driver.is_enabled(handle) else None,
            "held element to be clickable",
            timeout,
        )

    @allure.step("Wait for invisible: {locator}")
    def wait_for_invisible(self, locator: Locator, timeout: Optional[float] = None) -> None:
        """Wait until nothing visible matches the locator."""
        def no_visible_match():
            try:
                handle = self.driver.find_element(locator)
            except ElementNotFoundError:
                return True
            try:
                return not self.driver.is_visible(handle)
            except StaleElementError:
                return True

        self._until(no_visible_match, f"{locator} to be invisible", timeout)

    @allure.step("Wait for present: {locator}")
    def wait_for_present(self, locator: Locator, timeout: Optional[float] = None) -> None:
        """Wait until the locator matches an element in the document."""
        self._until(
            lambda: self.driver.find_element(locator) is not None,
            f"{locator} to be present",
            timeout,
            ignored=(ElementNotFoundError,),
        )

    # =========================================================================
    # Element Queries
    # =========================================================================

    def get_all_matching(self, locator: Locator, timeout: Optional[float] = None) -> List[Any]:
        """
        Wait for a visible match, then list every match in document order.

        The list is a snapshot taken after the wait.
        """
        self.wait_for_visible(locator, timeout)
        elements = list(self.driver.find_elements(locator))
        logger.debug(f"Found {len(elements)} elements for {locator}")
        return elements

    def resolve_column_index(self, column_name: str, header_locator: Locator) -> int:
        """
        Return the 1-based index of a table column by header text.

        Matching is case-insensitive and exact. With duplicate headers the
        last match wins. Returns 0 when no header matches.
        """
        headers = self.get_all_matching(header_locator)
        target = column_name.lower()
        column_index = 0

        for i, header in enumerate(headers, start=1):
            if self.driver.get_text(header).strip().lower() == target:
                column_index = i

        logger.debug(f"Column '{column_name}' resolved to index {column_index}")
        return column_index

    # =========================================================================
    # Interactions
    # =========================================================================

    def actions(self) -> ActionChain:
        """Start a new action chain on this session."""
        return ActionChain(self.driver)

    @allure.step("Select option in dropdown")
    def select_option(
        self,
        handle: Any,
        value: Optional[str] = None,
        label: Optional[str] = None,
        index: Optional[int] = None,
    ) -> List[str]:
        """
        Select a dropdown option by value, label or index.

        Returns:
            Values of the selected options
        """
        if [value, label, index].count(None) != 2:
            raise ValueError("Exactly one of value, label or index is required")
        return self.driver.select_option(handle, value=value, label=label, index=index)

    # =========================================================================
    # Assertions
    # =========================================================================

    @staticmethod
    def verify_text(actual: str, expected: str) -> None:
        """Fail the test when the two texts differ."""
        if actual != expected:
            raise AssertionError(f"Text mismatch: expected '{expected}', got '{actual}'")

    @staticmethod
    def assert_true(condition: bool, message: str = "Expected condition to be true") -> None:
        if not condition:
            raise AssertionError(message)


# Component name used throughout the docs
WaitEngine = UiUtilities


def capture_screenshot(
    driver: Driver,
    test_name: str,
    working_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Save a screenshot of the current page under <working_dir>/reports/<test_name>.png.

    Parent directories are created; an existing file is overwritten.

    Raises:
        CaptureError: If the driver cannot take the screenshot or the file
            cannot be written
    """
    reports_dir = Path(working_dir or Path.cwd()) / get_config("reports.dir", "reports")
    file_name = re.sub(r"[\\/]", "_", test_name)
    path = reports_dir / f"{file_name}.png"

    try:
        image = driver.capture_screenshot()
    except Exception as e:
        raise CaptureError(f"Screenshot failed for {test_name}: {e}") from e

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(image)
    except OSError as e:
        raise CaptureError(f"Could not write screenshot {path}: {e}") from e

    logger.info(f"Screenshot saved at: {path}")
    return path


__all__ = [
    "ActionChain",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_TIMEOUT",
    "UiUtilities",
    "WaitEngine",
    "WaitSpec",
    "capture_screenshot",
    "poll_until",
]
