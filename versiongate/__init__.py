"""versiongate - pick an implementation module by interpreter version and re-export it."""

__version__ = "0.1.0"

from .config import Settings, current_host_version, load_settings
from .errors import (
    ConfigError,
    EmptyRuleSetError,
    MalformedRuleSetError,
    MalformedVersionError,
    ModuleLoadError,
    NoExportsDeclaredError,
    NoMatchingRuleError,
    ResolutionStateError,
    UnknownOperatorError,
    VersionGateError,
)
from .facade import Facade, FacadeBuilder
from .loader import ChainLoader, ImportLoader, RegistryLoader, register_module
from .resolver import ResolutionState, ResolvedModule, Resolver, build_facade, reexport, resolve
from .rules import ConditionalClause, FallbackClause, RuleSet, load_ruleset, parse_tokens
from .version import VersionSpec, compare, parse_version

__all__ = [
    "__version__",
    # Comparator
    "VersionSpec",
    "compare",
    "parse_version",
    # Rules
    "ConditionalClause",
    "FallbackClause",
    "RuleSet",
    "load_ruleset",
    "parse_tokens",
    # Resolution
    "ResolutionState",
    "ResolvedModule",
    "Resolver",
    "build_facade",
    "reexport",
    "resolve",
    "Facade",
    "FacadeBuilder",
    # Loading
    "ChainLoader",
    "ImportLoader",
    "RegistryLoader",
    "register_module",
    # Settings
    "Settings",
    "current_host_version",
    "load_settings",
    # Errors
    "ConfigError",
    "EmptyRuleSetError",
    "MalformedRuleSetError",
    "MalformedVersionError",
    "ModuleLoadError",
    "NoExportsDeclaredError",
    "NoMatchingRuleError",
    "ResolutionStateError",
    "UnknownOperatorError",
    "VersionGateError",
]
