"""
Repository-level pytest configuration.

Why this exists:
  - Provide predictable defaults for local runs (no secrets are needed)
  - Initialise the shared Loguru logger once per test session
  - Keep behavior explicit and discoverable
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from dashboard_tools.common.global_config import init_logger


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _dashboard_env_defaults() -> Generator[None, None, None]:
    """
    Set environment defaults if not already provided by the user/CI.

    Live runs point at the public dashboard template unless UI_BASE_URL says
    otherwise; everything else runs in-process.
    """
    defaults = {
        "UI_BASE_URL": "https://dashboard-template.nuxt.dev",
        "UI_LIVE": "0",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    init_logger()
    yield
