"""
Module loading for resolution targets.

Targets are looked up by name through a ModuleLoader. Two loaders ship:

- RegistryLoader: an explicit name -> factory/instance registry filled at
  process start. Factories run at most once per name.
- ImportLoader: ``importlib.import_module``; ``sys.modules`` makes repeated
  loads return the already-initialized module.

ChainLoader tries loaders in order. "Not found" falls through to the next
loader; a module that fails during initialization stops the chain.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence, runtime_checkable

from .errors import ModuleLoadError

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)

NOT_FOUND = "not_found"
INIT_FAILED = "init_failed"


@runtime_checkable
class ModuleLoader(Protocol):
    """Resolve a module name to a loaded module handle."""

    def load(self, name: str) -> Any:
        """
        Load a module by name.

        Raises:
            ModuleLoadError: context["reason"] is "not_found" or "init_failed"
        """
        ...


class ModuleProvider:
    """A registered module: either a ready instance or a deferred factory."""

    def __init__(self, name: str, *, handle: Any = None, factory: Callable[[], Any] | None = None):
        if (handle is None) == (factory is None):
            raise ValueError("exactly one of handle or factory is required")
        self.name = name
        self._factory = factory
        self._handle = handle
        self._loaded = handle is not None

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self) -> Any:
        if not self._loaded:
            factory = self._factory
            if factory is None:
                raise ModuleLoadError(
                    "module has neither a handle nor a factory",
                    module=self.name,
                    reason=INIT_FAILED,
                    loader="registry",
                )
            try:
                self._handle = factory()
            except Exception as e:
                raise ModuleLoadError(
                    f"module failed during initialization: {e}",
                    module=self.name,
                    reason=INIT_FAILED,
                    loader="registry",
                ) from e
            self._loaded = True
        return self._handle


# Global registry: module name -> provider
_MODULES: dict[str, ModuleProvider] = {}


def register_module(
    name: str,
    handle: Any = None,
    *,
    factory: Callable[[], Any] | None = None,
    replace: bool = False,
) -> None:
    """
    Register a module implementation under ``name``.

    Args:
        name: Name rule sets refer to (e.g., "hashpop.modern")
        handle: Ready module object
        factory: Zero-argument callable producing the module on first load
        replace: Allow overwriting an existing registration
    """
    if name in _MODULES and not replace:
        raise ValueError(f"module already registered: {name}")
    _MODULES[name] = ModuleProvider(name, handle=handle, factory=factory)


def get_provider(name: str) -> ModuleProvider | None:
    return _MODULES.get(name)


def list_modules() -> list[str]:
    return list(_MODULES.keys())


def clear_modules() -> None:
    """Clear all registered modules (for testing)."""
    _MODULES.clear()


class RegistryLoader:
    def __init__(self, registry: dict[str, ModuleProvider] | None = None):
        self._registry = _MODULES if registry is None else registry

    def load(self, name: str) -> Any:
        provider = self._registry.get(name)
        if provider is None:
            raise ModuleLoadError("module is not registered", module=name, reason=NOT_FOUND, loader="registry")
        return provider.get()


class ImportLoader:
    def load(self, name: str) -> Any:
        try:
            return importlib.import_module(name)
        except ModuleNotFoundError as e:
            # A missing dependency inside the target is an initialization failure.
            missing = e.name or ""
            if missing and (name == missing or name.startswith(missing + ".")):
                raise ModuleLoadError("module not found", module=name, reason=NOT_FOUND, loader="import") from e
            raise ModuleLoadError(
                f"module failed during initialization: {e}",
                module=name,
                reason=INIT_FAILED,
                loader="import",
            ) from e
        except Exception as e:
            raise ModuleLoadError(
                f"module failed during initialization: {e}",
                module=name,
                reason=INIT_FAILED,
                loader="import",
            ) from e


class ChainLoader:
    def __init__(self, loaders: Sequence[ModuleLoader]):
        self.loaders = list(loaders)

    def load(self, name: str) -> Any:
        last: ModuleLoadError | None = None
        for loader in self.loaders:
            try:
                handle = loader.load(name)
            except ModuleLoadError as e:
                if e.context.get("reason") != NOT_FOUND:
                    raise
                last = e
                continue
            logger.debug("loaded %s via %s", name, type(loader).__name__)
            return handle

        raise ModuleLoadError(
            "module not found by any loader",
            module=name,
            reason=NOT_FOUND,
            tried=[type(loader).__name__ for loader in self.loaders],
        ) from last


def default_loader(settings: Settings | None = None) -> ChainLoader:
    """Registry first, then importlib unless ``registry_only`` is set."""
    loaders: list[ModuleLoader] = [RegistryLoader()]
    if settings is None or not settings.registry_only:
        loaders.append(ImportLoader())
    return ChainLoader(loaders)
