from __future__ import annotations

import types

import pytest

from versiongate.config import Settings
from versiongate.errors import ModuleLoadError
from versiongate.loader import (
    INIT_FAILED,
    NOT_FOUND,
    ChainLoader,
    ImportLoader,
    RegistryLoader,
    default_loader,
    get_provider,
    list_modules,
    register_module,
)


def _module(name: str, **attrs) -> types.ModuleType:
    module = types.ModuleType(name)
    for key, value in attrs.items():
        setattr(module, key, value)
    return module


def test_registry_returns_registered_instance() -> None:
    impl = _module("impl.fast", __all__=[])
    register_module("impl.fast", impl)
    assert RegistryLoader().load("impl.fast") is impl
    assert list_modules() == ["impl.fast"]


def test_registry_factory_runs_once() -> None:
    calls: list[int] = []

    def factory() -> types.ModuleType:
        calls.append(1)
        return _module("impl.lazy")

    register_module("impl.lazy", factory=factory)
    provider = get_provider("impl.lazy")
    assert provider is not None and not provider.loaded

    loader = RegistryLoader()
    first = loader.load("impl.lazy")
    second = loader.load("impl.lazy")
    assert first is second
    assert calls == [1]


def test_registry_factory_failure_is_propagated() -> None:
    def factory():
        raise RuntimeError("boom")

    register_module("impl.bad", factory=factory)
    with pytest.raises(ModuleLoadError) as exc_info:
        RegistryLoader().load("impl.bad")
    assert exc_info.value.context["reason"] == INIT_FAILED
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_provider_without_factory_raises_load_error() -> None:
    register_module("impl.hollow", factory=lambda: _module("hollow"))
    provider = get_provider("impl.hollow")
    provider._factory = None
    with pytest.raises(ModuleLoadError) as exc_info:
        provider.get()
    assert exc_info.value.context["reason"] == INIT_FAILED


def test_registry_rejects_duplicates_unless_replacing() -> None:
    register_module("impl.dup", _module("a"))
    with pytest.raises(ValueError):
        register_module("impl.dup", _module("b"))
    register_module("impl.dup", _module("c"), replace=True)
    assert RegistryLoader().load("impl.dup").__name__ == "c"


def test_register_requires_exactly_one_of_handle_or_factory() -> None:
    with pytest.raises(ValueError):
        register_module("impl.none")
    with pytest.raises(ValueError):
        register_module("impl.both", _module("x"), factory=lambda: _module("y"))


def test_registry_not_found() -> None:
    with pytest.raises(ModuleLoadError) as exc_info:
        RegistryLoader().load("impl.absent")
    assert exc_info.value.context["reason"] == NOT_FOUND


def test_import_loader_loads_and_caches() -> None:
    loader = ImportLoader()
    first = loader.load("hashpop_modern")
    assert first.IMPLEMENTATION == "modern"
    assert loader.load("hashpop_modern") is first


def test_import_loader_not_found() -> None:
    with pytest.raises(ModuleLoadError) as exc_info:
        ImportLoader().load("hashpop_does_not_exist")
    assert exc_info.value.context["reason"] == NOT_FOUND


def test_import_loader_initialization_failure() -> None:
    with pytest.raises(ModuleLoadError) as exc_info:
        ImportLoader().load("hashpop_broken")
    assert exc_info.value.context["reason"] == INIT_FAILED
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_import_loader_missing_dependency_is_initialization_failure() -> None:
    with pytest.raises(ModuleLoadError) as exc_info:
        ImportLoader().load("hashpop_missing_dep")
    assert exc_info.value.context["reason"] == INIT_FAILED
    assert isinstance(exc_info.value.__cause__, ModuleNotFoundError)


def test_chain_falls_through_on_not_found_only() -> None:
    chain = ChainLoader([RegistryLoader(), ImportLoader()])
    assert chain.load("hashpop_legacy").IMPLEMENTATION == "legacy"

    def factory():
        raise RuntimeError("no")

    register_module("hashpop_modern", factory=factory)
    with pytest.raises(ModuleLoadError) as exc_info:
        chain.load("hashpop_modern")
    assert exc_info.value.context["loader"] == "registry"


def test_chain_reports_every_loader_tried() -> None:
    chain = ChainLoader([RegistryLoader(), ImportLoader()])
    with pytest.raises(ModuleLoadError) as exc_info:
        chain.load("hashpop_nowhere")
    assert exc_info.value.context["tried"] == ["RegistryLoader", "ImportLoader"]


def test_registry_wins_over_import() -> None:
    shadow = _module("hashpop_modern", __all__=["IMPLEMENTATION"], IMPLEMENTATION="registered")
    register_module("hashpop_modern", shadow)
    assert default_loader().load("hashpop_modern") is shadow


def test_registry_only_setting_disables_import() -> None:
    loader = default_loader(Settings(registry_only=True))
    with pytest.raises(ModuleLoadError):
        loader.load("hashpop_modern")
