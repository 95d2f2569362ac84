"""
Functoids - uniform wrappers around the ways a binding can produce an instance.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from .introspection import DependencyInfo, SignatureIntrospector


T = TypeVar("T")


class FunctoidKind(Enum):
    """How a functoid produces its value."""

    CLASS = "class"
    FUNCTION = "function"
    VALUE = "value"
    PROVIDER = "provider"


@dataclass(frozen=True)
class Functoid(Generic[T]):
    """
    A callable recipe for an instance together with the keys it depends on.

    ``PROVIDER`` functoids wrap a zero-argument callable owned by someone else,
    typically another locator's scoped provider, and never declare dependencies.
    """

    kind: FunctoidKind
    original_func: Callable[..., T] | None = None
    value: Any = None
    dependencies: tuple[DependencyInfo, ...] = field(default=())

    def call(self, **kwargs: Any) -> T:
        if self.kind is FunctoidKind.VALUE:
            return self.value  # type: ignore[no-any-return]
        assert self.original_func is not None
        return self.original_func(**kwargs)

    @property
    def produces_new_instances(self) -> bool:
        """True if every call constructs a fresh object owned by the calling graph."""
        return self.kind in (FunctoidKind.CLASS, FunctoidKind.FUNCTION)

    def __str__(self) -> str:
        if self.kind is FunctoidKind.VALUE:
            return f"value {type(self.value).__name__}"
        name = getattr(self.original_func, "__qualname__", repr(self.original_func))
        return f"{self.kind.value} {name}"


def class_functoid(cls: type[T]) -> Functoid[T]:
    """Create a functoid that instantiates ``cls`` with injected constructor arguments."""
    return Functoid(FunctoidKind.CLASS, cls, None, tuple(SignatureIntrospector.extract_from_callable(cls)))


def function_functoid(func: Callable[..., T]) -> Functoid[T]:
    """Create a functoid that calls ``func`` with injected arguments."""
    return Functoid(FunctoidKind.FUNCTION, func, None, tuple(SignatureIntrospector.extract_from_callable(func)))


def value_functoid(value: T) -> Functoid[T]:
    """Create a functoid that always returns ``value``."""
    return Functoid(FunctoidKind.VALUE, None, value)


def provider_functoid(provider: Callable[[], T]) -> Functoid[T]:
    """Create a functoid delegating to an existing zero-argument provider."""
    return Functoid(FunctoidKind.PROVIDER, provider)
