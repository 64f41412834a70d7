"""Pytest configuration and fixtures."""

import sys
import types
from pathlib import Path

import pytest

from versiongate.config import ENV_CONVENTION, ENV_HOST_VERSION, ENV_REGISTRY_ONLY, Settings
from versiongate.loader import clear_modules

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch):
    """Keep environment overrides and registrations from leaking between tests."""
    for var in (ENV_HOST_VERSION, ENV_CONVENTION, ENV_REGISTRY_ONLY):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.syspath_prepend(str(FIXTURES))
    clear_modules()
    yield
    clear_modules()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def consumer(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """An empty module registered in sys.modules, standing in for a module being defined."""
    module = types.ModuleType("consumer_under_test")
    monkeypatch.setitem(sys.modules, module.__name__, module)
    return module

