"""
Lazy singleton scopes.

Both scopes compute an instance once per binding key and cache it forever.
They differ only in locking:

- ``LazySingletonScope`` serializes every first-time construction behind one
  lock shared by all keys of the scope instance.
- ``FineGrainedLazySingletonScope`` allocates one lock per key, so unrelated
  keys construct concurrently while concurrent requests for the same key wait
  for the first construction and then share its result.

A ``ScopeRegistry`` owns one instance of each. ``ScopeRegistry.default()`` is
shared by every graph of the process; tests construct isolated registries.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, ClassVar, Protocol

from .core import ModuleDef
from .model.bindings import Scope
from .model.keys import DIKey

logger = logging.getLogger(__name__)

_MISSING = object()


class ScopeImpl(Protocol):
    """A lifetime policy that can wrap an unscoped provider."""

    def scope(self, key: DIKey, unscoped: Callable[[], Any]) -> Callable[[], Any]: ...


class ScopedProvider:
    """A provider wrapped by a caching scope."""

    __slots__ = ("key", "owner", "unscoped")

    def __init__(self, owner: _CachingScope, key: DIKey, unscoped: Callable[[], Any]):
        self.owner = owner
        self.key = key
        self.unscoped = unscoped

    def __call__(self) -> Any:
        return self.owner.provide(self)

    def __repr__(self) -> str:
        return f"{type(self.owner).__name__}[{self.key}]"


class _CachingScope:
    def __init__(self) -> None:
        self._instances: dict[DIKey, Any] = {}

    def scope(self, key: DIKey, unscoped: Callable[[], Any]) -> Callable[[], Any]:
        """Wrap ``unscoped`` so it is invoked at most once for ``key``."""
        if isinstance(unscoped, ScopedProvider) and unscoped.owner is self:
            return unscoped
        return ScopedProvider(self, key, unscoped)

    def provide(self, provider: ScopedProvider) -> Any:
        instance = self._instances.get(provider.key, _MISSING)
        if instance is not _MISSING:
            return instance

        with self._lock_for(provider.key):
            instance = self._instances.get(provider.key, _MISSING)
            if instance is _MISSING:
                logger.debug("Constructing %s in %s", provider.key, type(self).__name__)
                instance = provider.unscoped()
                self._instances[provider.key] = instance
            return instance

    def is_cached(self, key: DIKey) -> bool:
        return key in self._instances

    def _lock_for(self, key: DIKey) -> threading.RLock:
        raise NotImplementedError


class LazySingletonScope(_CachingScope):
    """Compute-once scope guarded by a single lock for all keys."""

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.RLock()

    def _lock_for(self, key: DIKey) -> threading.RLock:  # noqa: ARG002
        return self._lock


class FineGrainedLazySingletonScope(_CachingScope):
    """Compute-once scope with an independent lock per key."""

    def __init__(self) -> None:
        super().__init__()
        self._locks: dict[DIKey, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: DIKey) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock


class ScopeRegistry:
    """Owns the lazy singleton scopes installed into graphs."""

    _default: ClassVar[ScopeRegistry | None] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self.lazy_singleton = LazySingletonScope()
        self.fine_grained_lazy_singleton = FineGrainedLazySingletonScope()

    @classmethod
    def default(cls) -> ScopeRegistry:
        """Get the process-wide registry."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls()
        return cls._default

    def scopes(self) -> dict[Scope, ScopeImpl]:
        return {
            Scope.LAZY_SINGLETON: self.lazy_singleton,
            Scope.FINE_GRAINED_LAZY_SINGLETON: self.fine_grained_lazy_singleton,
        }

    def resolve(self, scope: Scope, key: DIKey, provider: Callable[[], Any]) -> Callable[[], Any]:
        """Wrap ``provider`` with the caching semantics of ``scope``."""
        impl = self.scopes().get(scope)
        if impl is None:
            raise ValueError(f"{scope} is not a lazy singleton scope")
        return impl.scope(key, provider)

    def module(self) -> ModuleDef:
        """A module binding both scopes to their scope kinds."""
        module = ModuleDef()
        for scope, impl in self.scopes().items():
            module.bind_scope(scope, impl)
        return module
