"""
================================================================================
Suites Pytest Configuration
================================================================================

Registers the project-wide markers and tags tests by directory.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "unit: Tests running against the in-memory fake driver"
    )
    config.addinivalue_line(
        "markers", "ui: Tests driving a real browser"
    )


def pytest_collection_modifyitems(config, items):
    """Auto-add 'unit' / 'ui' markers based on the test directory."""
    for item in items:
        if "ui_testing" in str(item.fspath):
            item.add_marker(pytest.mark.ui)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Web UI Test-Support Layer",
        "=" * 60,
        "",
    ]
