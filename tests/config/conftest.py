"""Shared pytest fixtures for configuration-focused tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from agent_defs.config.config import AppConfig


@pytest.fixture(autouse=True)
def reset_config_singleton() -> Iterator[None]:
    """Reset the configuration singleton around a test run."""

    AppConfig.reset()
    try:
        yield None
    finally:
        AppConfig.reset()
