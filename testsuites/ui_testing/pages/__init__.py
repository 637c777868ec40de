"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the dashboard screens.

Each page class encapsulates:
    - Element locators
    - Page-specific actions
    - Verification methods

Author: Automation Team
License: MIT
================================================================================
"""

from .home_page import HomePage
from .inbox_page import InboxPage
from .customers_page import CustomersPage
from .settings_page import SettingsPage

__all__ = [
    "HomePage",
    "InboxPage",
    "CustomersPage",
    "SettingsPage",
]
