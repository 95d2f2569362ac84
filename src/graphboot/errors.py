"""
Exceptions raised while configuring and building object graphs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model.keys import DIKey


class GraphbootError(Exception):
    """Base class for all graphboot errors."""


class ConfigurationError(GraphbootError):
    """Raised when markers, modules or builder settings are inconsistent."""


class DuplicateBindingError(ConfigurationError):
    """Raised when auto-discovery produces two bindings for the same key."""

    def __init__(self, key: DIKey, first: object, second: object):
        self.key = key
        self.first = first
        self.second = second
        super().__init__(f"Duplicate binding for {key}: declared by both {_name(first)} and {_name(second)}")


class ProvisionError(GraphbootError):
    """Raised when a provider fails while constructing an instance."""

    def __init__(self, key: DIKey, cause: BaseException):
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to provision {key}: {type(cause).__name__}: {cause}")


class LifecycleValidationError(GraphbootError):
    """Raised when one or more lifecycle validators fail."""

    def __init__(self, failures: list[tuple[object, BaseException]]):
        self.failures = failures
        details = "; ".join(f"{type(instance).__name__}: {error}" for instance, error in failures)
        super().__init__(f"Lifecycle validation failed: {details}")


def _name(obj: object) -> str:
    return getattr(obj, "__qualname__", None) or type(obj).__qualname__
