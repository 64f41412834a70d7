"""
Settings for version-gated resolution.

Sources, lowest to highest precedence:
- built-in defaults
- ``[tool.versiongate]`` in a pyproject.toml
- ``VERSIONGATE_*`` environment variables
- explicit keyword overrides
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .errors import ConfigError
from .version import CONVENTIONS, parse_version

ENV_HOST_VERSION = "VERSIONGATE_HOST_VERSION"
ENV_CONVENTION = "VERSIONGATE_CONVENTION"
ENV_REGISTRY_ONLY = "VERSIONGATE_REGISTRY_ONLY"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    host_version: str | None = None  # None: use the running interpreter
    version_convention: str = "auto"
    registry_only: bool = False  # never fall back to importlib


def interpreter_version() -> str:
    """The running interpreter version as a dotted string (e.g. "3.12.4")."""
    return ".".join(str(part) for part in sys.version_info[:3])


def current_host_version(settings: Settings | None = None) -> str:
    settings = settings or Settings()
    return settings.host_version or interpreter_version()


def _coerce_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError("expected a boolean value", key=key, value=value)


def _read_pyproject(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError("config file not found", path=str(path))

    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except Exception as e:
            raise ConfigError(f"failed to parse TOML: {e}", path=str(path)) from e

    tool = data.get("tool", {})
    section = tool.get("versiongate", {}) if isinstance(tool, dict) else {}
    if not isinstance(section, dict):
        raise ConfigError("[tool.versiongate] must be a table", path=str(path))
    return section


def _validate(settings: Settings) -> Settings:
    if settings.version_convention not in CONVENTIONS:
        raise ConfigError(
            f"version_convention must be one of {', '.join(CONVENTIONS)}",
            value=settings.version_convention,
        )
    if settings.host_version is not None:
        # Surface a bad override at load time rather than at first resolution.
        parse_version(settings.host_version, settings.version_convention)
    return settings


def load_settings(
    pyproject: Path | None = None,
    env: Mapping[str, str] | None = None,
    **overrides: Any,
) -> Settings:
    """
    Build Settings from a pyproject.toml, the environment and overrides.

    Args:
        pyproject: Optional path to a pyproject.toml with a [tool.versiongate] table
        env: Environment mapping (defaults to os.environ)
        overrides: Field values that win over every other source; None is ignored

    Raises:
        ConfigError: unreadable file or invalid values
        MalformedVersionError: host_version override that does not parse
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}

    if pyproject is not None:
        section = _read_pyproject(Path(pyproject))
        if "host_version" in section:
            values["host_version"] = str(section["host_version"])
        if "version_convention" in section:
            values["version_convention"] = str(section["version_convention"]).strip().lower()
        if "registry_only" in section:
            values["registry_only"] = _coerce_bool(section["registry_only"], "registry_only")

    if env.get(ENV_HOST_VERSION):
        values["host_version"] = env[ENV_HOST_VERSION].strip()
    if env.get(ENV_CONVENTION):
        values["version_convention"] = env[ENV_CONVENTION].strip().lower()
    if ENV_REGISTRY_ONLY in env:
        values["registry_only"] = _coerce_bool(env[ENV_REGISTRY_ONLY], ENV_REGISTRY_ONLY)

    for key, value in overrides.items():
        if key not in Settings.__dataclass_fields__:
            raise ConfigError("unknown setting", key=key)
        if value is not None:
            values[key] = value

    return _validate(replace(Settings(), **values))
