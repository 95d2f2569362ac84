"""
Model subpackage containing core data structures and types.

This subpackage contains the fundamental data structures that form the
dependency injection model, organized to avoid circular dependencies.
"""

from .keys import DIKey, Id
from .bindings import Binding, Scope
from .graph import CircularDependencyError, DependencyGraph, MissingBindingError
from .plan import Plan
from .stage import Stage

__all__ = [
    "Binding",
    "CircularDependencyError",
    "DependencyGraph",
    "DIKey",
    "Id",
    "MissingBindingError",
    "Plan",
    "Scope",
    "Stage",
]
