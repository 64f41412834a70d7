"""
Error taxonomy for version-gated resolution.

Every error carries a ``context`` dict with the operands needed to diagnose
a failure (clause, operator, versions, attempted module) without re-running
the resolution.
"""

from __future__ import annotations

from typing import Any


class VersionGateError(Exception):
    """Base class for all resolution errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{self.message} ({details})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON reports."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "context": dict(self.context),
        }


class MalformedVersionError(VersionGateError, ValueError):
    """A version string is empty or contains something other than digits and dots."""


class MalformedRuleSetError(VersionGateError, ValueError):
    """A rule set violates its structural invariants."""


class UnknownOperatorError(MalformedRuleSetError):
    """A conditional clause names an operator outside gt/ge/eq/ne/le/lt."""


class EmptyRuleSetError(VersionGateError):
    """Resolution was asked to evaluate a rule set with no clauses."""


class NoMatchingRuleError(VersionGateError):
    """The conditional clause evaluated false and no fallback exists."""


class ModuleLoadError(VersionGateError, ImportError):
    """The selected module could not be found or failed during initialization."""


class NoExportsDeclaredError(VersionGateError):
    """The selected module declares no ``__all__``."""


class ResolutionStateError(VersionGateError, RuntimeError):
    """A resolver was driven through an illegal state transition."""


class ConfigError(VersionGateError, ValueError):
    """Settings could not be loaded or hold invalid values."""
