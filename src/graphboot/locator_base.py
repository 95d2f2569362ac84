"""
Abstract Locator interface and implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, TypeVar

from .errors import GraphbootError, ProvisionError
from .model import DIKey, MissingBindingError, Plan, Scope
from .model.plan import ProvisionListener

if TYPE_CHECKING:
    from .core import ModuleDef
    from .scopes import ScopeImpl

T = TypeVar("T")


class Locator(ABC):
    """
    Abstract interface for dependency locators.

    A locator is the handle of a constructed object graph: it provides
    instances of requested keys based on a validated Plan.
    """

    @abstractmethod
    def has_key_locally(self, key: DIKey) -> bool:
        """Check if this locator has a binding for the key."""

    @abstractmethod
    def has_key(self, key: DIKey) -> bool:
        """Check if this locator (or its parent chain) has the key."""

    @abstractmethod
    def is_empty(self) -> bool:
        """Check if this is an empty locator."""

    @abstractmethod
    def get_instance(self, key: DIKey) -> Any:
        """
        Get an instance for the given key.

        Raises:
            MissingBindingError: If no binding exists for the key
            ProvisionError: If constructing the instance failed
        """

    @abstractmethod
    def get_provider(self, key: DIKey) -> Callable[[], Any]:
        """Get the scoped provider producing instances of the key."""

    @abstractmethod
    def keys(self) -> list[DIKey]:
        """All keys bound in this locator (excluding its parents), in declaration order."""

    @abstractmethod
    def run(self, func: Callable[..., T]) -> T:
        """
        Execute a function with dependency injection.

        Args:
            func: Function (or class) to call with injected dependencies

        Returns:
            The result of the function call
        """

    @abstractmethod
    def plan(self) -> Plan:
        """Get the Plan this Locator is executing."""

    @abstractmethod
    def scopes(self) -> dict[Scope, ScopeImpl]:
        """Custom scope implementations installed in this locator."""

    @abstractmethod
    def listeners(self) -> list[ProvisionListener]:
        """Provision listeners installed in this locator."""

    @property
    @abstractmethod
    def parent(self) -> Locator | None:
        """Get the parent locator, if any."""

    def get(self, target_type: type[T] | Any, name: str | None = None) -> T:
        """
        Get an instance of the given type.

        Args:
            target_type: The type to resolve
            name: Optional name qualifier

        Returns:
            An instance of the requested type
        """
        return self.get_instance(DIKey(target_type, name))  # type: ignore[no-any-return]

    def find(self, target_type: type[T] | Any, name: str | None = None) -> T | None:
        """Try to get an instance, returning None if there is no binding for it."""
        key = DIKey(target_type, name)
        if not self.has_key(key):
            return None
        return self.get_instance(key)  # type: ignore[no-any-return]

    def has(self, target_type: type[T] | Any, name: str | None = None) -> bool:
        """Check if an instance can be resolved for the given type."""
        return self.has_key(DIKey(target_type, name))

    def create(self, cls: type[T]) -> T:
        """
        Instantiate an unbound class, injecting its constructor dependencies.

        Raises:
            ProvisionError: If the constructor fails
        """
        try:
            return self.run(cls)
        except GraphbootError:
            raise
        except Exception as e:
            raise ProvisionError(DIKey(cls), e) from e

    def create_child(self, modules: Iterable[ModuleDef]) -> Locator:
        """
        Create a child locator whose graph may depend on this one.

        The child inherits custom scopes and provision listeners.
        """
        from .injector import Injector
        from .planner_input import PlannerInput

        injector = Injector.inherit(self)
        return injector.produce(injector.plan(PlannerInput(modules, self.plan().stage)))

    @staticmethod
    def empty() -> Locator:
        """
        Create an empty Locator that has no dependencies and can be used as a null object.

        Returns:
            An empty Locator instance
        """
        return LocatorEmpty.instance()


class LocatorEmpty(Locator):
    """
    Empty locator implementation that provides no dependencies.

    This is a singleton that serves as a null object for parent locators.
    """

    _instance: LocatorEmpty | None = None

    def __init__(self) -> None:
        """Private constructor - use instance() instead."""
        if LocatorEmpty._instance is not None:
            raise RuntimeError("LocatorEmpty is a singleton - use instance() method")

    @classmethod
    def instance(cls) -> LocatorEmpty:
        """Get the singleton empty locator instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def has_key_locally(self, key: DIKey) -> bool:  # noqa: ARG002
        return False

    def has_key(self, key: DIKey) -> bool:  # noqa: ARG002
        return False

    def is_empty(self) -> bool:
        return True

    def get_instance(self, key: DIKey) -> Any:
        raise MissingBindingError(key)

    def get_provider(self, key: DIKey) -> Callable[[], Any]:
        raise MissingBindingError(key)

    def keys(self) -> list[DIKey]:
        return []

    def run(self, func: Callable[..., T]) -> T:  # noqa: ARG002
        raise ValueError("Empty locator cannot execute functions with dependency injection")

    def plan(self) -> Plan:
        return Plan.empty()

    def scopes(self) -> dict[Scope, ScopeImpl]:
        return {}

    def listeners(self) -> list[ProvisionListener]:
        return []

    @property
    def parent(self) -> Locator | None:
        return None
