"""
Core components: modules and the binding DSL.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .functoid import (
    Functoid,
    class_functoid,
    function_functoid,
    provider_functoid,
    value_functoid,
)
from .model.bindings import Binding, Scope
from .model.keys import DIKey

if TYPE_CHECKING:
    from .model.plan import ProvisionListener
    from .scopes import ScopeImpl

T = TypeVar("T")


class ModuleDef:
    """
    A module definition containing bindings for dependency injection.

    Modules can be used directly or subclassed. A subclass may declare
    constructor dependencies; when it is installed by class, those are
    injected from the bootstrap graph:

        ```python
        class DatabaseModule(ModuleDef):
            def __init__(self, settings: Settings):
                super().__init__()
                self.make(Database).using().func(lambda: connect(settings.url))
        ```
    """

    def __init__(self) -> None:
        self._bindings: list[Binding] = []
        self._scopes: dict[Scope, ScopeImpl] = {}
        self._listeners: list[ProvisionListener] = []

    @property
    def bindings(self) -> list[Binding]:
        """Get all bindings defined in this module."""
        return list(self._bindings)

    @property
    def scope_bindings(self) -> dict[Scope, ScopeImpl]:
        return dict(self._scopes)

    @property
    def listeners(self) -> list[ProvisionListener]:
        return list(self._listeners)

    def add_binding(self, binding: Binding) -> None:
        """Add a binding to this module."""
        self._bindings.append(binding)

    def make(self, target_type: type[T] | Any) -> BindingBuilder[T]:
        """Create a binding builder for the given type."""
        return BindingBuilder(target_type, self)

    def many(self, target_type: type[T]) -> SetBindingBuilder[T]:
        """Create a set binding builder for the given type."""
        return SetBindingBuilder(target_type, self)

    def bind_scope(self, scope: Scope, impl: ScopeImpl) -> None:
        """Install the implementation of a custom scope."""
        if scope.is_builtin:
            raise ValueError(f"{scope} is built in and cannot be rebound")
        self._scopes[scope] = impl

    def listen(self, listener: ProvisionListener) -> None:
        """Register a callback invoked with every instance the graph constructs."""
        self._listeners.append(listener)

    def include(self, other: ModuleDef) -> None:
        """Copy every binding, scope and listener of ``other`` into this module."""
        self._bindings.extend(other._bindings)
        self._scopes.update(other._scopes)
        self._listeners.extend(other._listeners)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self._bindings)} bindings)"


class BootstrapModule(ModuleDef):
    """
    A module whose bindings go into the bootstrap graph.

    Besides regular bindings, a bootstrap module can include plain modules
    (classes or instances) into the main module list.
    """

    def __init__(self) -> None:
        super().__init__()
        self._included_modules: list[ModuleDef | type[ModuleDef]] = []

    @property
    def included_modules(self) -> list[ModuleDef | type[ModuleDef]]:
        return list(self._included_modules)

    def include_module(self, *modules: ModuleDef | type[ModuleDef]) -> None:
        self._included_modules.extend(modules)


class BindingBuilder(Generic[T]):
    """Builder for creating bindings."""

    def __init__(self, target_type: type[T] | Any, module: ModuleDef):
        self._target_type = target_type
        self._module = module
        self._name: str | None = None
        self._scope = Scope.SINGLETON

    def named(self, name: str) -> BindingBuilder[T]:
        """Add a name to this binding."""
        self._name = name
        return self

    def in_scope(self, scope: Scope) -> BindingBuilder[T]:
        """Set the lifetime policy of this binding."""
        self._scope = scope
        return self

    def using(self) -> UsingBuilder[T]:
        """Create a UsingBuilder for fluent binding configuration."""

        def finalize_binding(functoid: Functoid[T]) -> None:
            key = DIKey(self._target_type, self._name)
            self._module.add_binding(Binding(key, functoid, self._scope))

        return UsingBuilder(self._target_type, finalize_binding)


class SetBindingBuilder(Generic[T]):
    """Builder for creating set bindings."""

    def __init__(self, target_type: type[T], module: ModuleDef):
        self._target_type = target_type
        self._module = module
        self._name: str | None = None

    def named(self, name: str) -> SetBindingBuilder[T]:
        self._name = name
        return self

    def _add(self, functoid: Functoid[T]) -> SetBindingBuilder[T]:
        key = DIKey(set[self._target_type], self._name)  # type: ignore[name-defined]
        self._module.add_binding(Binding(key, functoid, Scope.SINGLETON, set_element=True))
        return self

    def add_value(self, instance: T) -> SetBindingBuilder[T]:
        """Add a value instance to the set."""
        return self._add(value_functoid(instance))

    def add_type(self, cls: type[T]) -> SetBindingBuilder[T]:
        """Add a class type to the set (will be instantiated)."""
        return self._add(class_functoid(cls))

    def add_func(self, factory: Callable[..., T]) -> SetBindingBuilder[T]:
        """Add a factory function to the set."""
        return self._add(function_functoid(factory))


class UsingBuilder(Generic[T]):
    """Builder for creating functoid-based bindings with a fluent API."""

    def __init__(self, target_type: type[T], finalize_callback: Callable[[Functoid[T]], None]):
        self._target_type = target_type
        self._finalize_callback = finalize_callback

    def value(self, instance: T) -> None:
        """Bind to a specific instance value."""
        self._finalize_callback(value_functoid(instance))

    def type(self, cls: type[T]) -> None:
        """Bind to a class that will be instantiated."""
        self._finalize_callback(class_functoid(cls))

    def func(self, factory: Callable[..., T]) -> None:
        """Bind to a factory function."""
        self._finalize_callback(function_functoid(factory))

    def provider(self, provider: Callable[[], T]) -> None:
        """Bind to an existing zero-argument provider, e.g. another locator's."""
        self._finalize_callback(provider_functoid(provider))
