"""
================================================================================
Web UI Tools
================================================================================

Infrastructure shared by the UI test-support layer.

Modules:
    - common: Configuration loading and loguru logging setup
    - report_tools: Buffered run report (one entry per test, flushed once)

Example:
    from webui_tools.common import get_config, init_logger
    from webui_tools.report_tools import ReportSink

    init_logger()
    sink = ReportSink("reports/run-report.json")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
