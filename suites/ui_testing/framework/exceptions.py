"""
Error taxonomy for the UI test-support layer.

Wait errors always propagate to the calling test. Capture and resolution
errors are only ever caught by the lifecycle recorder, which logs them next to
the original failure.
"""


class UiSupportError(Exception):
    """Base class for every error raised by the UI framework."""
    pass


class WaitTimeoutError(UiSupportError, TimeoutError):
    """Raised when a wait condition did not hold within its timeout."""
    pass


class ElementNotFoundError(UiSupportError, LookupError):
    """Raised when a locator matches no element."""
    pass


class StaleElementError(UiSupportError):
    """Raised when a held element's node was detached or replaced."""
    pass


class CaptureError(UiSupportError):
    """Raised when a screenshot cannot be taken or written."""
    pass


class ResolutionError(UiSupportError):
    """Raised when the driver of a failing test cannot be obtained."""
    pass


__all__ = [
    "UiSupportError",
    "WaitTimeoutError",
    "ElementNotFoundError",
    "StaleElementError",
    "CaptureError",
    "ResolutionError",
]
