"""
Export lists: reading a module's declared ``__all__`` and merging names into
a consumer's own ``__all__``.
"""

from __future__ import annotations

from typing import Any, Iterable

from .errors import ModuleLoadError, NoExportsDeclaredError


def handle_name(handle: Any) -> str:
    return getattr(handle, "__name__", None) or type(handle).__name__


def get_declared_exports(handle: Any) -> list[str]:
    """
    Return the ordered, de-duplicated names a module declares in ``__all__``.

    Raises:
        NoExportsDeclaredError: the module has no ``__all__``
        ModuleLoadError: ``__all__`` is malformed or names something undefined
    """
    name = handle_name(handle)
    declared = getattr(handle, "__all__", None)
    if declared is None:
        raise NoExportsDeclaredError("module declares no __all__", module=name)

    if isinstance(declared, str) or not isinstance(declared, (list, tuple)):
        raise ModuleLoadError("__all__ must be a list or tuple of names", module=name)

    bad = [n for n in declared if not isinstance(n, str) or not n]
    if bad:
        raise ModuleLoadError("__all__ contains non-string entries", module=name, entries=bad)

    missing = [n for n in declared if not hasattr(handle, n)]
    if missing:
        raise ModuleLoadError("__all__ names attributes the module does not define", module=name, missing=missing)

    return list(dict.fromkeys(declared))


def grant_export_capability(consumer: Any) -> list[str]:
    """
    Make sure ``consumer`` has a mutable ``__all__`` list and return it.

    Idempotent. A tuple ``__all__`` is converted to a list in place.
    """
    current = getattr(consumer, "__all__", None)
    if current is None:
        current = []
        setattr(consumer, "__all__", current)
    elif isinstance(current, tuple):
        current = list(current)
        setattr(consumer, "__all__", current)
    elif not isinstance(current, list):
        raise TypeError(f"{handle_name(consumer)}.__all__ must be a list or tuple, got {type(current).__name__}")
    return current


def append_exports(consumer: Any, names: Iterable[str]) -> list[str]:
    """
    Append ``names`` to the consumer's ``__all__``, preserving order and
    skipping names already present.

    Returns:
        The names that were actually added.
    """
    exported = grant_export_capability(consumer)
    present = set(exported)
    added: list[str] = []
    for name in names:
        if name in present:
            continue
        exported.append(name)
        present.add(name)
        added.append(name)
    return added
