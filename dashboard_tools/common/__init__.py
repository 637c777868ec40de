"""
================================================================================
Dashboard Tools Common Utilities
================================================================================

Shared configuration management and logging setup.

Usage:
    from dashboard_tools.common import get_config, init_logger

    init_logger()
    base_url = get_config("ui.base_url")

================================================================================
"""

from .global_config import (
    get_config,
    get_logger,
    init_logger,
    reload_config,
    set_config,
)

__all__ = [
    "get_config",
    "get_logger",
    "init_logger",
    "reload_config",
    "set_config",
]
