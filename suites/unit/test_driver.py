from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError, Page

from suites.ui_testing.framework import (
    ActionStep,
    Driver,
    ElementNotFoundError,
    Locator,
    PlaywrightDriver,
    ResolutionError,
    StaleElementError,
    as_driver,
)
from suites.unit.fakes import FakeDriver


# =============================================================================
# Locator
# =============================================================================

@pytest.mark.parametrize(
    "locator, selector",
    [
        (Locator.css("table th"), "table th"),
        (Locator.xpath("//button"), "xpath=//button"),
        (Locator.id("rows"), "id=rows"),
        (Locator.text("Save"), "text=Save"),
        (Locator.test_id("btn-login"), "data-testid=btn-login"),
    ],
)
def test_locator_selector(locator, selector):
    assert locator.selector == selector


@pytest.mark.parametrize("factory, engine", [(Locator.id, "id"), (Locator.test_id, "data-testid")])
def test_locator_quoted_value_uses_attribute_engine(factory, engine):
    # no CSS quoting involved, so quotes in the value stay literal
    assert factory("it's").selector == f"{engine}=it's"


def test_locator_is_a_value():
    assert Locator.css("#a") == Locator("css", "#a")
    assert hash(Locator.css("#a")) == hash(Locator("css", "#a"))
    assert str(Locator.id("rows")) == "id=rows"


def test_locator_validation():
    with pytest.raises(ValueError, match="Unknown locator strategy"):
        Locator("name", "q")
    with pytest.raises(ValueError, match="must not be empty"):
        Locator.css("")


# =============================================================================
# Playwright adapter
# =============================================================================

@pytest.fixture
def page():
    return MagicMock(spec=Page)


@pytest.fixture
def handle():
    handle = MagicMock()
    handle.evaluate.return_value = True
    return handle


def test_find_element(page, handle):
    page.query_selector.return_value = handle

    assert PlaywrightDriver(page).find_element(Locator.id("rows")) is handle
    page.query_selector.assert_called_once_with("id=rows")


def test_find_element_missing(page):
    page.query_selector.return_value = None

    with pytest.raises(ElementNotFoundError, match="id=rows"):
        PlaywrightDriver(page).find_element(Locator.id("rows"))


def test_find_elements_returns_list(page, handle):
    page.query_selector_all.return_value = (handle, handle)

    assert PlaywrightDriver(page).find_elements(Locator.css("th")) == [handle, handle]


def test_disposed_handle_is_detached(page, handle):
    handle.evaluate.side_effect = PlaywrightError("Execution context was destroyed")
    driver = PlaywrightDriver(page)

    assert driver.is_attached(handle) is False
    with pytest.raises(StaleElementError):
        driver.is_visible(handle)
    handle.is_visible.assert_not_called()


def test_detached_node_is_stale(page, handle):
    handle.evaluate.return_value = False

    with pytest.raises(StaleElementError):
        PlaywrightDriver(page).is_enabled(handle)


def test_state_queries(page, handle):
    handle.is_visible.return_value = True
    handle.is_enabled.return_value = False
    handle.inner_text.return_value = "Ready"
    driver = PlaywrightDriver(page)

    assert driver.is_visible(handle) is True
    assert driver.is_enabled(handle) is False
    assert driver.get_text(handle) == "Ready"


def test_detach_during_query_is_stale(page, handle):
    handle.inner_text.side_effect = PlaywrightError("Element is not attached to the DOM")

    with pytest.raises(StaleElementError):
        PlaywrightDriver(page).get_text(handle)


def test_capture_screenshot(page):
    page.screenshot.return_value = b"\x89PNG"

    assert PlaywrightDriver(page).capture_screenshot() == b"\x89PNG"
    page.screenshot.assert_called_once_with(full_page=True)


def test_perform_actions(page, handle):
    PlaywrightDriver(page).perform_actions([
        ActionStep("click", handle),
        ActionStep("fill", handle, ("ana",)),
        ActionStep("press", handle, ("Enter",)),
    ])

    handle.click.assert_called_once_with()
    handle.fill.assert_called_once_with("ana")
    handle.press.assert_called_once_with("Enter")


def test_unknown_action(page, handle):
    with pytest.raises(ValueError, match="Unknown action"):
        PlaywrightDriver(page).perform_actions([ActionStep("drag", handle)])


def test_select_option(page, handle):
    handle.select_option.return_value = ["l"]

    assert PlaywrightDriver(page).select_option(handle, label="Large") == ["l"]
    handle.select_option.assert_called_once_with(value=None, label="Large", index=None)


# =============================================================================
# Driver resolution
# =============================================================================

def test_as_driver_wraps_page(page):
    driver = as_driver(page)

    assert isinstance(driver, PlaywrightDriver)
    assert driver.page is page


def test_as_driver_accepts_driver_implementations():
    fake = FakeDriver()

    assert isinstance(fake, Driver)
    assert as_driver(fake) is fake


def test_as_driver_rejects_other_objects():
    with pytest.raises(ResolutionError, match="dict"):
        as_driver({})
