"""
Lifecycle hooks for constructed instances.

Methods decorated with ``@post_construct`` run as soon as the final graph
constructs the instance, ``@validator`` methods run on
``LifecycleManager.validate()`` and ``@pre_destroy`` methods run on
``LifecycleManager.stop()`` in reverse construction order.

Example:
    ```python
    class ConnectionPool:
        @post_construct
        def open(self) -> None: ...

        @pre_destroy
        def close(self) -> None: ...
    ```
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from .core import ModuleDef
from .errors import LifecycleValidationError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_HOOK_ATTR = "__graphboot_lifecycle_hook__"


class Hook(Enum):
    POST_CONSTRUCT = "post_construct"
    PRE_DESTROY = "pre_destroy"
    VALIDATE = "validate"


def _hook(kind: Hook) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        setattr(func, _HOOK_ATTR, kind)
        return func

    return decorator


post_construct = _hook(Hook.POST_CONSTRUCT)
pre_destroy = _hook(Hook.PRE_DESTROY)
validator = _hook(Hook.VALIDATE)


@dataclass(frozen=True)
class LifecycleMethods:
    """Names of the hook methods of one class, base classes first."""

    post_construct: tuple[str, ...] = ()
    pre_destroy: tuple[str, ...] = ()
    validate: tuple[str, ...] = ()

    @property
    def has_lifecycle(self) -> bool:
        return bool(self.post_construct or self.pre_destroy or self.validate)


class LifecycleMethodsFactory:
    """Resolves and caches the lifecycle methods of classes."""

    def __init__(self) -> None:
        self._cache: dict[type, LifecycleMethods] = {}
        self._lock = threading.Lock()

    def for_type(self, cls: type) -> LifecycleMethods:
        with self._lock:
            methods = self._cache.get(cls)
            if methods is None:
                methods = self._resolve(cls)
                self._cache[cls] = methods
            return methods

    @staticmethod
    def _resolve(cls: type) -> LifecycleMethods:
        hooks: dict[str, Hook] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                hook = getattr(attr, _HOOK_ATTR, None)
                if isinstance(hook, Hook):
                    hooks[name] = hook
                elif name in hooks and callable(attr):
                    # Overridden without the decorator
                    del hooks[name]

        return LifecycleMethods(
            post_construct=tuple(name for name, hook in hooks.items() if hook is Hook.POST_CONSTRUCT),
            pre_destroy=tuple(name for name, hook in hooks.items() if hook is Hook.PRE_DESTROY),
            validate=tuple(name for name, hook in hooks.items() if hook is Hook.VALIDATE),
        )


class LifecycleState(Enum):
    LATENT = "latent"
    STARTED = "started"
    CLOSED = "closed"


class LifecycleManager:
    """
    Tracks instances with lifecycle hooks and drives their transitions.

    ``start()``, ``validate()`` and ``stop()`` are called by application code
    once the graph is built.
    """

    def __init__(self, methods_factory: LifecycleMethodsFactory):
        self._methods_factory = methods_factory
        self._lock = threading.Lock()
        self._managed: list[tuple[object, LifecycleMethods]] = []
        self._state = LifecycleState.LATENT

    @property
    def state(self) -> LifecycleState:
        return self._state

    def managed_instances(self) -> list[object]:
        with self._lock:
            return [instance for instance, _ in self._managed]

    def notify(self, instance: object) -> bool:
        """
        Track ``instance`` if it has lifecycle hooks and run its post-construct methods.

        Returns:
            True if the instance is now managed
        """
        methods = self._methods_factory.for_type(type(instance))
        if not methods.has_lifecycle:
            return False

        with self._lock:
            if self._state is LifecycleState.CLOSED:
                raise RuntimeError(f"Cannot manage {type(instance).__qualname__}: lifecycle manager is closed")
            self._managed.append((instance, methods))

        for name in methods.post_construct:
            getattr(instance, name)()
        return True

    def start(self) -> None:
        with self._lock:
            if self._state is not LifecycleState.LATENT:
                raise RuntimeError(f"Cannot start lifecycle manager in state {self._state.value}")
            self._state = LifecycleState.STARTED
            count = len(self._managed)
        logger.info("Lifecycle started with %d managed instances", count)

    def validate(self) -> None:
        """
        Run every validator hook.

        Raises:
            LifecycleValidationError: Listing every failing instance
        """
        failures: list[tuple[object, BaseException]] = []
        for instance, methods in self._snapshot():
            for name in methods.validate:
                try:
                    getattr(instance, name)()
                except Exception as e:
                    failures.append((instance, e))

        if failures:
            raise LifecycleValidationError(failures)

    def stop(self) -> None:
        """Run pre-destroy hooks in reverse order. Failing hooks are logged and skipped."""
        with self._lock:
            if self._state is LifecycleState.CLOSED:
                return
            self._state = LifecycleState.CLOSED

        for instance, methods in reversed(self._snapshot()):
            for name in methods.pre_destroy:
                try:
                    getattr(instance, name)()
                except Exception:
                    logger.exception("Pre-destroy hook %s.%s failed", type(instance).__qualname__, name)

    def _snapshot(self) -> list[tuple[object, LifecycleMethods]]:
        with self._lock:
            return list(self._managed)


class InternalLifecycleModule(ModuleDef):
    """Registers every eligible instance constructed by a graph with the lifecycle manager."""

    def __init__(self, manager: LifecycleManager, methods_factory: LifecycleMethodsFactory):
        super().__init__()
        self._manager = manager
        self._methods_factory = methods_factory
        self.listen(self._on_provision)

    def _on_provision(self, instance: object) -> None:
        if self._methods_factory.for_type(type(instance)).has_lifecycle:
            self._manager.notify(instance)
