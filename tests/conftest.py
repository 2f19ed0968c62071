"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep TASKPOLLER_* settings from the developer's shell or .env out of tests."""
    for name in list(os.environ):
        if name.startswith("TASKPOLLER_"):
            monkeypatch.delenv(name, raising=False)
