"""
================================================================================
Driver Capability
================================================================================

The browser automation backend as seen by the wait engine and the lifecycle
recorder.

Components:
    - Locator: immutable "how to find it" value (strategy + selector)
    - Driver: structural protocol every backend satisfies
    - PlaywrightDriver: adapter over a Playwright sync Page

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from loguru import logger
from playwright.sync_api import ElementHandle, Error as PlaywrightError, Page

from .exceptions import ElementNotFoundError, ResolutionError, StaleElementError


# ================================================================================
# Locator
# ================================================================================

@dataclass(frozen=True)
class Locator:
    """
    Description of how to find element(s) in the current document.

    Usage:
        >>> Locator.css("table thead th")
        >>> Locator.test_id("btn-login")
        >>> Locator.xpath("//button[text()='Save']")
    """

    strategy: str
    value: str

    STRATEGIES = ("css", "xpath", "id", "text", "test_id")

    def __post_init__(self) -> None:
        if self.strategy not in self.STRATEGIES:
            raise ValueError(
                f"Unknown locator strategy: {self.strategy}. "
                f"Expected one of: {', '.join(self.STRATEGIES)}"
            )
        if not self.value:
            raise ValueError("Locator value must not be empty")

    @classmethod
    def css(cls, value: str) -> "Locator":
        return cls("css", value)

    @classmethod
    def xpath(cls, value: str) -> "Locator":
        return cls("xpath", value)

    @classmethod
    def id(cls, value: str) -> "Locator":
        return cls("id", value)

    @classmethod
    def text(cls, value: str) -> "Locator":
        return cls("text", value)

    @classmethod
    def test_id(cls, value: str) -> "Locator":
        return cls("test_id", value)

    @property
    def selector(self) -> str:
        """Playwright selector string for this locator."""
        if self.strategy == "css":
            return self.value
        if self.strategy == "xpath":
            return f"xpath={self.value}"
        if self.strategy == "id":
            return f"id={self.value}"
        if self.strategy == "text":
            return f"text={self.value}"
        return f"data-testid={self.value}"

    def __str__(self) -> str:
        return f"{self.strategy}={self.value}"


# ================================================================================
# Driver Protocol
# ================================================================================

@dataclass(frozen=True)
class ActionStep:
    """One step of an action sequence (see UiUtilities.actions())."""
    name: str
    handle: Any
    args: Tuple[Any, ...] = field(default_factory=tuple)


@runtime_checkable
class Driver(Protocol):
    """
    Capability the wait engine consumes.

    Element handles are opaque to callers; only the driver that produced a
    handle interprets it.
    """

    def find_element(self, locator: Locator) -> Any:
        """First match in document order; ElementNotFoundError if none."""
        ...

    def find_elements(self, locator: Locator) -> List[Any]:
        """All matches in document order (possibly empty)."""
        ...

    def is_visible(self, handle: Any) -> bool:
        """StaleElementError if the handle is detached."""
        ...

    def is_enabled(self, handle: Any) -> bool:
        """StaleElementError if the handle is detached."""
        ...

    def is_attached(self, handle: Any) -> bool:
        ...

    def get_text(self, handle: Any) -> str:
        ...

    def capture_screenshot(self) -> bytes:
        ...

    def perform_actions(self, steps: Sequence[ActionStep]) -> None:
        ...

    def select_option(
        self,
        handle: Any,
        value: Optional[str] = None,
        label: Optional[str] = None,
        index: Optional[int] = None,
    ) -> List[str]:
        ...


# ================================================================================
# Playwright Adapter
# ================================================================================

class PlaywrightDriver:
    """
    Driver backed by a Playwright sync Page.

    Usage:
        with sync_playwright() as p:
            page = p.chromium.launch().new_page()
            driver = PlaywrightDriver(page)
            ui = UiUtilities(driver)
    """

    def __init__(self, page: Page):
        self.page = page

    def find_element(self, locator: Locator) -> ElementHandle:
        handle = self.page.query_selector(locator.selector)
        if handle is None:
            raise ElementNotFoundError(f"No element matches locator: {locator}")
        return handle

    def find_elements(self, locator: Locator) -> List[ElementHandle]:
        return list(self.page.query_selector_all(locator.selector))

    def is_attached(self, handle: ElementHandle) -> bool:
        try:
            return bool(handle.evaluate("node => node.isConnected"))
        except PlaywrightError as e:
            # Disposed handle / destroyed execution context after navigation
            logger.debug(f"Handle no longer usable, treating as detached: {e}")
            return False

    def is_visible(self, handle: ElementHandle) -> bool:
        self._ensure_attached(handle)
        try:
            return handle.is_visible()
        except PlaywrightError as e:
            raise StaleElementError(f"Element detached during visibility check: {e}") from e

    def is_enabled(self, handle: ElementHandle) -> bool:
        self._ensure_attached(handle)
        try:
            return handle.is_enabled()
        except PlaywrightError as e:
            raise StaleElementError(f"Element detached during enabled check: {e}") from e

    def get_text(self, handle: ElementHandle) -> str:
        self._ensure_attached(handle)
        try:
            return handle.inner_text()
        except PlaywrightError as e:
            raise StaleElementError(f"Element detached while reading text: {e}") from e

    def capture_screenshot(self) -> bytes:
        return self.page.screenshot(full_page=True)

    def perform_actions(self, steps: Sequence[ActionStep]) -> None:
        for step in steps:
            self._ensure_attached(step.handle)
            if step.name == "click":
                step.handle.click()
            elif step.name == "double_click":
                step.handle.dblclick()
            elif step.name == "hover":
                step.handle.hover()
            elif step.name == "fill":
                step.handle.fill(*step.args)
            elif step.name == "press":
                step.handle.press(*step.args)
            else:
                raise ValueError(f"Unknown action: {step.name}")
            logger.debug(f"Performed action: {step.name} {step.args or ''}")

    def select_option(
        self,
        handle: ElementHandle,
        value: Optional[str] = None,
        label: Optional[str] = None,
        index: Optional[int] = None,
    ) -> List[str]:
        self._ensure_attached(handle)
        return handle.select_option(value=value, label=label, index=index)

    def _ensure_attached(self, handle: ElementHandle) -> None:
        if not self.is_attached(handle):
            raise StaleElementError("Element is no longer attached to the document")


def as_driver(obj: Any) -> Driver:
    """
    Return a Driver for a fixture value.

    Accepts any Driver implementation or a raw Playwright sync Page.

    Raises:
        ResolutionError: When the object is neither
    """
    if isinstance(obj, Page):
        return PlaywrightDriver(obj)
    if isinstance(obj, Driver):
        return obj
    raise ResolutionError(
        f"Object of type {type(obj).__name__} is not a driver or Playwright page"
    )


__all__ = [
    "ActionStep",
    "Driver",
    "Locator",
    "PlaywrightDriver",
    "as_driver",
]
