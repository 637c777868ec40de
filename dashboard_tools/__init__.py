"""
================================================================================
Dashboard Tools
================================================================================

Supporting utilities for the dashboard UI test suite.

Modules:
    - common: Configuration loading and Loguru setup
    - report_tools: Allure attachments and report generation

Example:
    from dashboard_tools.common import get_config, init_logger
    from dashboard_tools.report_tools.allure_utils import attach_json

    init_logger()
    attach_json({"base_url": get_config("ui.base_url")}, name="Environment")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
