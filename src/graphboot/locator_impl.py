"""
Concrete implementation of Locator.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from .errors import ConfigurationError, GraphbootError, ProvisionError
from .introspection import DependencyInfo, SignatureIntrospector
from .locator_base import Locator
from .logger_injection import AutoLoggerManager
from .model import Binding, CircularDependencyError, DIKey, MissingBindingError, Plan, Scope, Stage
from .model.plan import ProvisionListener

if TYPE_CHECKING:
    from .scopes import ScopeImpl

T = TypeVar("T")

logger = logging.getLogger(__name__)

_MISSING = object()


class _SingletonProvider:
    """
    Caches the first result of a provider for the lifetime of one locator.

    Each binding has its own lock, so locks are only ever nested along
    dependency edges.
    """

    __slots__ = ("_instance", "_lock", "_unscoped")

    def __init__(self, unscoped: Callable[[], Any]):
        self._unscoped = unscoped
        self._lock = threading.RLock()
        self._instance: Any = _MISSING

    def __call__(self) -> Any:
        instance = self._instance
        if instance is _MISSING:
            with self._lock:
                if self._instance is _MISSING:
                    self._instance = self._unscoped()
                instance = self._instance
        return instance


class LocatorImpl(Locator):
    """
    Concrete implementation of Locator that resolves instances on demand.

    Every binding of the plan gets one provider wrapped in the binding's scope.
    Singletons are cached per locator, lazy singleton scopes delegate to the
    scope implementations installed in the plan.

    Supports locator inheritance: keys missing from this locator are looked up
    in the parent chain.
    """

    def __init__(self, plan: Plan, parent: Locator):
        """
        Create a new LocatorImpl from a Plan.

        Args:
            plan: The validated Plan to execute
            parent: Parent locator for dependency inheritance
        """
        self._plan = plan
        self._parent = parent
        self._local = threading.local()
        self._providers: dict[DIKey, Callable[[], Any]] = {}

        graph = plan.graph
        for key, binding in graph.get_all_bindings().items():
            self._providers[key] = self._scoped_provider(binding)

        for key in graph.set_keys():
            elements = [self._scoped_provider(binding) for binding in graph.get_set_bindings(key)]
            self._providers[key] = self._set_provider(self._providers.get(key), elements)

        self._providers.setdefault(DIKey(Locator), lambda: self)

    def _scoped_provider(self, binding: Binding) -> Callable[[], Any]:
        unscoped = functools.partial(self._provision, binding)

        if binding.scope is Scope.UNSCOPED:
            return unscoped
        if binding.scope in (Scope.SINGLETON, Scope.EAGER_SINGLETON):
            return _SingletonProvider(unscoped)

        scope = self._plan.scopes.get(binding.scope)
        if scope is None:
            raise ConfigurationError(f"No scope implementation is bound for {binding.scope.value} ({binding})")
        return scope.scope(binding.key, unscoped)

    @staticmethod
    def _set_provider(
        base: Callable[[], Any] | None, elements: Sequence[Callable[[], Any]]
    ) -> Callable[[], set[Any]]:
        def provide_set() -> set[Any]:
            result: set[Any] = set(base()) if base is not None else set()
            result.update(element() for element in elements)
            return result

        return provide_set

    def _resolving(self) -> list[DIKey]:
        stack: list[DIKey] | None = getattr(self._local, "stack", None)
        if stack is None:
            stack = []
            self._local.stack = stack
        return stack

    def _provision(self, binding: Binding) -> Any:
        """Run a binding's functoid with resolved dependencies."""
        key = binding.key
        stack = self._resolving()
        if key in stack:
            raise CircularDependencyError(stack[stack.index(key) :] + [key])

        stack.append(key)
        try:
            functoid = binding.functoid
            kwargs = self._resolve_arguments(functoid.dependencies, functoid.original_func, key)
            try:
                instance = functoid.call(**kwargs)
                if functoid.produces_new_instances:
                    for listener in self._plan.listeners:
                        listener(instance)
            except GraphbootError:
                raise
            except Exception as e:
                raise ProvisionError(key, e) from e
            return instance
        finally:
            stack.pop()

    def _resolve_arguments(
        self,
        dependencies: Sequence[DependencyInfo],
        requester: Callable[..., Any] | None,
        dependent: DIKey | None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        for dep in dependencies:
            key = dep.key
            if self.has_key(key):
                kwargs[dep.name] = self.get_instance(key)
            elif dep.has_default:
                continue
            elif dep.is_optional:
                kwargs[dep.name] = None
            elif AutoLoggerManager.should_auto_inject_logger(key):
                kwargs[dep.name] = AutoLoggerManager.create_logger(requester)
            else:
                raise MissingBindingError(key, dependent)
        return kwargs

    def instantiate_eagerly(self) -> None:
        """Construct the singletons the plan's stage requires up front."""
        stage = self._plan.stage
        if stage is Stage.TOOL:
            return

        eager_scopes = {Scope.EAGER_SINGLETON}
        if stage is Stage.PRODUCTION:
            eager_scopes.add(Scope.SINGLETON)

        graph = self._plan.graph
        for key, binding in graph.get_all_bindings().items():
            if binding.scope in eager_scopes:
                self.get_instance(key)

        if stage is Stage.PRODUCTION:
            for key in graph.set_keys():
                self.get_instance(key)

    def has_key_locally(self, key: DIKey) -> bool:
        return key in self._providers

    def has_key(self, key: DIKey) -> bool:
        return self.has_key_locally(key) or self._parent.has_key(key)

    def is_empty(self) -> bool:
        return False

    def get_instance(self, key: DIKey) -> Any:
        provider = self._providers.get(key)
        if provider is not None:
            return provider()
        if self._parent.has_key(key):
            return self._parent.get_instance(key)
        raise MissingBindingError(key)

    def get_provider(self, key: DIKey) -> Callable[[], Any]:
        provider = self._providers.get(key)
        if provider is not None:
            return provider
        return self._parent.get_provider(key)

    def keys(self) -> list[DIKey]:
        return list(self._providers.keys())

    def run(self, func: Callable[..., T]) -> T:
        """
        Execute a function with dependency injection.

        Uses the signature of the function to determine what dependencies to inject.

        Example:
            def my_app(service: MyService, config: Config) -> str:
                return service.process(config.value)

            result = locator.run(my_app)
        """
        dependencies = SignatureIntrospector.extract_from_callable(func)
        return func(**self._resolve_arguments(dependencies, func, None))

    def plan(self) -> Plan:
        return self._plan

    def scopes(self) -> dict[Scope, ScopeImpl]:
        return dict(self._plan.scopes)

    def listeners(self) -> list[ProvisionListener]:
        return list(self._plan.listeners)

    @property
    def parent(self) -> Locator | None:
        return self._parent if not self._parent.is_empty() else None
