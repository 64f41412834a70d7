"""
Forwarding facades over a resolved implementation module.

Rather than copying the implementation's objects into the consumer, each
exported routine gets a forwarding entry point that looks the name up on
the owned implementation at call time. Non-routine exports (classes,
constants) are bound by value so identity checks keep working.
"""

from __future__ import annotations

import functools
import inspect
import logging
from typing import TYPE_CHECKING, Any

from .exports import append_exports, handle_name

if TYPE_CHECKING:
    from .resolver import ResolvedModule

logger = logging.getLogger(__name__)

FORWARD_MARKER = "__versiongate_forward__"


def make_forwarder(implementation: Any, name: str) -> Any:
    """Build the entry point that dispatches ``name`` to ``implementation``."""
    target = getattr(implementation, name)
    if not inspect.isroutine(target):
        return target

    @functools.wraps(target)
    def forward(*args: Any, **kwargs: Any) -> Any:
        return getattr(implementation, name)(*args, **kwargs)

    setattr(forward, FORWARD_MARKER, handle_name(implementation))
    return forward


def is_forwarder(obj: Any) -> bool:
    return getattr(obj, FORWARD_MARKER, None) is not None


class Facade:
    """A standalone re-exporting object: one attribute per exported name."""

    def __init__(self, name: str, implementation: Any, entries: dict[str, Any]):
        self.__name__ = name
        # Dunder names leave every ordinary name free for exports.
        self.__implementation__ = implementation
        self.__exports__ = dict(entries)
        self.__all__ = list(entries)

    def __getattr__(self, name: str) -> Any:
        entries = self.__dict__.get("__exports__", {})
        try:
            return entries[name]
        except KeyError:
            raise AttributeError(f"facade {self.__name__!r} has no export {name!r}") from None

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self.__exports__))

    def __repr__(self) -> str:
        return f"<Facade {self.__name__!r} -> {handle_name(self.__implementation__)!r}>"


class FacadeBuilder:
    """Build forwarding entry points once, then hand them out or install them."""

    def __init__(self, resolved: ResolvedModule):
        self.resolved = resolved
        self._entries: dict[str, Any] | None = None

    def entry_points(self) -> dict[str, Any]:
        if self._entries is None:
            self._entries = {
                name: make_forwarder(self.resolved.module, name) for name in self.resolved.exports
            }
        return self._entries

    def build(self, name: str | None = None) -> Facade:
        return Facade(name or self.resolved.name, self.resolved.module, self.entry_points())

    def install(self, consumer: Any) -> list[str]:
        """
        Bind every entry point on ``consumer`` and merge the names into its
        ``__all__``. Returns the names newly added to ``__all__``.
        """
        entries = self.entry_points()
        namespace = vars(consumer)
        for name in entries:
            existing = namespace.get(name)
            if existing is not None and not is_forwarder(existing) and existing is not entries[name]:
                logger.warning(
                    "%s.%s is replaced by the export from %s",
                    handle_name(consumer),
                    name,
                    self.resolved.name,
                )

        added = append_exports(consumer, entries)
        for name, entry in entries.items():
            setattr(consumer, name, entry)
        return added
