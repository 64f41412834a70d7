"""
Rule resolution: pick one implementation module by host version and make a
consumer re-export it.

Typical use, from inside the consumer module's own body::

    from versiongate import reexport

    reexport(__name__, "if", "ge", "3.11", "mypkg._modern", "else", "mypkg._legacy")

Resolution runs once, synchronously, while the consumer is being imported.
Any failure propagates out of the import, so the consumer never exists in a
half-configured state. A module that declares no ``__all__`` is the one
non-fatal case: it is logged and merged as an empty export list.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

from .config import Settings, current_host_version, load_settings
from .errors import ModuleLoadError, NoExportsDeclaredError, ResolutionStateError, VersionGateError
from .exports import get_declared_exports, grant_export_capability
from .facade import Facade, FacadeBuilder
from .loader import ModuleLoader, default_loader
from .rules import RuleSet, Selection, load_ruleset, parse_mapping, parse_tokens, select_target

logger = logging.getLogger(__name__)

RESOLUTION_ATTR = "__versiongate__"

RuleInput = Union[RuleSet, Sequence[str], Mapping[str, Any], Path]


class ResolutionState(str, Enum):
    UNRESOLVED = "unresolved"
    EVALUATING = "evaluating"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class ResolvedModule:
    """The module a rule set selected and a copy of its export list."""

    name: str
    module: Any = field(repr=False, compare=False)
    exports: tuple[str, ...] = ()
    selection: Selection | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "module": self.name,
            "exports": list(self.exports),
            "selection": self.selection.to_dict() if self.selection else None,
        }


def as_ruleset(rules: RuleInput, *, source: str | None = None) -> RuleSet:
    """Accept a RuleSet, a token sequence, decoded TOML, or a rule file path."""
    if isinstance(rules, RuleSet):
        return rules
    if isinstance(rules, Path):
        return load_ruleset(rules)
    if isinstance(rules, Mapping):
        return parse_mapping(dict(rules), source=source)
    if isinstance(rules, str):
        raise TypeError("rules must be a token sequence, not a single string")
    return parse_tokens(list(rules), source=source)


def consumer_module(consumer: Any) -> Any:
    """Return the consumer object, looking names up in ``sys.modules``."""
    if not isinstance(consumer, str):
        return consumer
    module = sys.modules.get(consumer)
    if module is None:
        raise VersionGateError("consumer module is not loaded", consumer=consumer)
    return module


class Resolver:
    """
    Single-use resolver.

    State moves unresolved -> evaluating -> resolved | failed. Both end
    states are terminal; a second resolve() raises ResolutionStateError.
    """

    def __init__(self, loader: ModuleLoader | None = None, settings: Settings | None = None):
        self.settings = settings or load_settings()
        self.loader = loader or default_loader(self.settings)
        self.state = ResolutionState.UNRESOLVED
        self.result: ResolvedModule | None = None
        self.error: BaseException | None = None

    def resolve(
        self,
        consumer: Any,
        ruleset: RuleSet,
        current_version: str | None = None,
    ) -> ResolvedModule:
        """
        Evaluate ``ruleset``, load the winner and re-export it through ``consumer``.

        ``consumer`` may be a module, a module name in ``sys.modules``, or
        None to resolve without installing anything.
        """
        if self.state is not ResolutionState.UNRESOLVED:
            raise ResolutionStateError("resolver has already run", state=self.state.value)
        self.state = ResolutionState.EVALUATING

        try:
            target = consumer_module(consumer) if consumer is not None else None
            resolved = self._evaluate(ruleset, current_version)
            if target is not None:
                self._install(target, resolved)
        except Exception as e:
            self.state = ResolutionState.FAILED
            self.error = e
            raise

        self.state = ResolutionState.RESOLVED
        self.result = resolved
        return resolved

    def _evaluate(self, ruleset: RuleSet, current_version: str | None) -> ResolvedModule:
        version = current_version if current_version is not None else current_host_version(self.settings)
        selection = select_target(ruleset, version, convention=self.settings.version_convention)
        logger.debug("selected %s (%s)", selection.target, selection.clause.describe())

        handle = self._load(selection)

        try:
            exports = get_declared_exports(handle)
        except NoExportsDeclaredError as e:
            logger.warning("%s; nothing to re-export", e)
            exports = []

        return ResolvedModule(
            name=selection.target,
            module=handle,
            exports=tuple(exports),
            selection=selection,
        )

    def _load(self, selection: Selection) -> Any:
        try:
            return self.loader.load(selection.target)
        except ModuleLoadError as e:
            e.context.setdefault("clause", selection.clause.describe())
            if selection.source:
                e.context.setdefault("source", selection.source)
            raise
        except Exception as e:
            raise ModuleLoadError(
                f"loader failed: {e}",
                module=selection.target,
                clause=selection.clause.describe(),
                source=selection.source,
            ) from e

    def _install(self, consumer: Any, resolved: ResolvedModule) -> None:
        builder = FacadeBuilder(resolved)
        # All entry points exist before the consumer is touched.
        builder.entry_points()
        grant_export_capability(consumer)
        added = builder.install(consumer)
        setattr(consumer, RESOLUTION_ATTR, resolved)
        logger.debug(
            "%s re-exports %d name(s) from %s (%d new)",
            getattr(consumer, "__name__", consumer),
            len(resolved.exports),
            resolved.name,
            len(added),
        )


def resolve(
    consumer: Any,
    rules: RuleInput,
    current_version: str | None = None,
    *,
    loader: ModuleLoader | None = None,
    settings: Settings | None = None,
) -> ResolvedModule:
    """Run a fresh Resolver. Repeating it with the same inputs leaves the same ``__all__``."""
    source = consumer if isinstance(consumer, str) else getattr(consumer, "__name__", None)
    ruleset = as_ruleset(rules, source=source)
    return Resolver(loader=loader, settings=settings).resolve(consumer, ruleset, current_version)


def reexport(
    consumer: Any,
    *tokens: str,
    host_version: str | None = None,
    loader: ModuleLoader | None = None,
    settings: Settings | None = None,
) -> ResolvedModule:
    """
    Resolve flat ``if``/``else`` tokens on behalf of ``consumer``.

    Example:
        reexport(__name__, "if", "ge", "3.11", "pkg._new", "else", "pkg._old")
    """
    return resolve(consumer, list(tokens), host_version, loader=loader, settings=settings)


def build_facade(
    rules: RuleInput,
    *,
    name: str | None = None,
    host_version: str | None = None,
    loader: ModuleLoader | None = None,
    settings: Settings | None = None,
) -> Facade:
    """Resolve ``rules`` into a standalone Facade object instead of a module."""
    resolved = Resolver(loader=loader, settings=settings).resolve(
        None, as_ruleset(rules, source=name), host_version
    )
    return FacadeBuilder(resolved).build(name)
