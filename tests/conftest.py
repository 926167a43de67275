"""Shared fixtures for the test suite."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run each test in an empty directory with no CONFIG_PATH set.

    Settings read ./config.json, so a stray file in the repository root
    must not leak into tests. structlog is reset afterwards because main()
    configures it globally.
    """
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    structlog.reset_defaults()
