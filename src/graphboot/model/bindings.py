"""
Binding definitions and types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .keys import DIKey

if TYPE_CHECKING:
    from ..functoid import Functoid


class Scope(Enum):
    """Lifetime policies a binding can be declared with."""

    UNSCOPED = "unscoped"
    SINGLETON = "singleton"
    EAGER_SINGLETON = "eager_singleton"
    LAZY_SINGLETON = "lazy_singleton"
    FINE_GRAINED_LAZY_SINGLETON = "fine_grained_lazy_singleton"

    @property
    def is_builtin(self) -> bool:
        """Built-in scopes are implemented by every locator, custom ones must be bound."""
        return self in (Scope.UNSCOPED, Scope.SINGLETON, Scope.EAGER_SINGLETON)


@dataclass(frozen=True)
class Binding:
    """A dependency injection binding: a key, the functoid producing it and its scope."""

    key: DIKey
    functoid: Functoid[Any]
    scope: Scope = Scope.SINGLETON
    set_element: bool = False

    def __str__(self) -> str:
        element_str = " (set element)" if self.set_element else ""
        return f"{self.key} -> {self.functoid} [{self.scope.value}]{element_str}"
