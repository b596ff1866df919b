"""Shared test fixtures."""

from __future__ import annotations

import pytest

from subfork import Settings, TaskManager

_ENV_VARS = (
    "SUBFORK_ERROR_EXIT_CODE",
    "SUBFORK_SIGNAL_EXIT_CODE",
    "SUBFORK_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment overrides out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def manager() -> TaskManager:
    return TaskManager(settings=Settings())
