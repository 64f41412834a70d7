from __future__ import annotations

import sys
from pathlib import Path

import pytest

from versiongate.config import (
    ENV_CONVENTION,
    ENV_HOST_VERSION,
    ENV_REGISTRY_ONLY,
    Settings,
    current_host_version,
    interpreter_version,
    load_settings,
)
from versiongate.errors import ConfigError, MalformedVersionError


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults() -> None:
    settings = load_settings(env={})
    assert settings == Settings()
    assert current_host_version(settings) == interpreter_version()


def test_interpreter_version_matches_sys() -> None:
    major, minor, micro = sys.version_info[:3]
    assert interpreter_version() == f"{major}.{minor}.{micro}"


def test_pyproject_table(tmp_path: Path) -> None:
    pyproject = _write(
        tmp_path / "pyproject.toml",
        """
[project]
name = "consumer"

[tool.versiongate]
host_version = "5.013000"
version_convention = "decimal"
registry_only = true
""",
    )
    settings = load_settings(pyproject, env={})
    assert settings == Settings(host_version="5.013000", version_convention="decimal", registry_only=True)


def test_pyproject_without_table_uses_defaults(tmp_path: Path) -> None:
    pyproject = _write(tmp_path / "pyproject.toml", '[project]\nname = "x"\n')
    assert load_settings(pyproject, env={}) == Settings()


def test_environment_overrides_pyproject(tmp_path: Path) -> None:
    pyproject = _write(tmp_path / "pyproject.toml", '[tool.versiongate]\nhost_version = "3.8"\n')
    env = {ENV_HOST_VERSION: "3.12.1", ENV_CONVENTION: "DOTTED", ENV_REGISTRY_ONLY: "yes"}
    settings = load_settings(pyproject, env=env)
    assert settings.host_version == "3.12.1"
    assert settings.version_convention == "dotted"
    assert settings.registry_only is True


def test_keyword_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_HOST_VERSION, "3.9")
    settings = load_settings(host_version="3.13", version_convention=None)
    assert settings.host_version == "3.13"
    assert settings.version_convention == "auto"


def test_invalid_values() -> None:
    with pytest.raises(ConfigError):
        load_settings(env={ENV_CONVENTION: "semver"})
    with pytest.raises(ConfigError):
        load_settings(env={ENV_REGISTRY_ONLY: "maybe"})
    with pytest.raises(ConfigError):
        load_settings(env={}, colour="blue")
    with pytest.raises(MalformedVersionError):
        load_settings(env={ENV_HOST_VERSION: "3.x"})


def test_unreadable_pyproject(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "missing.toml", env={})
    broken = _write(tmp_path / "pyproject.toml", "[tool.versiongate\n")
    with pytest.raises(ConfigError):
        load_settings(broken, env={})
