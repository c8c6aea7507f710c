"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for real-browser tests: a session-wide Playwright browser, a fresh
page per test, and the wait engine bound to it.

Tests are skipped when no Playwright browser is installed
(`playwright install chromium`).

================================================================================
"""

from typing import Generator

import pytest
from playwright.sync_api import Browser, Error as PlaywrightError, Page, sync_playwright

from suites.ui_testing.framework import PlaywrightDriver, UiUtilities, WaitSpec
from webui_tools.common import get_config


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def browser() -> Generator[Browser, None, None]:
    """Session-scoped browser shared by all UI tests."""
    browser_type = get_config("ui.browser", "chromium")
    headless = get_config("ui.headless", True)

    with sync_playwright() as p:
        launcher = getattr(p, browser_type, p.chromium)
        try:
            browser = launcher.launch(headless=headless)
        except PlaywrightError as e:
            pytest.skip(f"Playwright browser not available: {e}")
        yield browser
        browser.close()


@pytest.fixture
def page(browser: Browser) -> Generator[Page, None, None]:
    """Function-scoped page in its own context."""
    context = browser.new_context(viewport={"width": 1280, "height": 800})
    page = context.new_page()
    yield page
    context.close()


@pytest.fixture
def driver(page: Page) -> PlaywrightDriver:
    return PlaywrightDriver(page)


@pytest.fixture
def ui(driver: PlaywrightDriver) -> UiUtilities:
    """Wait engine with short timeouts for local pages."""
    return UiUtilities(driver, WaitSpec(timeout=3.0, poll_interval=0.05))
