"""
Dependency graph formation and validation.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import GraphbootError
from ..logger_injection import AutoLoggerManager
from .bindings import Binding
from .keys import DIKey

if TYPE_CHECKING:
    from ..introspection import DependencyInfo

logger = logging.getLogger(__name__)


class CircularDependencyError(GraphbootError):
    """Raised when circular dependencies are detected."""

    def __init__(self, cycle: list[DIKey]):
        self.cycle = cycle
        cycle_str = " -> ".join(str(key) for key in cycle)
        super().__init__(f"Circular dependency detected: {cycle_str}")


class MissingBindingError(GraphbootError, ValueError):
    """Raised when a required binding is not found."""

    def __init__(self, key: DIKey, dependent: DIKey | None = None):
        self.key = key
        self.dependent = dependent
        msg = f"No binding found for {key}"
        if dependent:
            msg += f" (required by {dependent})"
        super().__init__(msg)


@dataclass
class GraphNode:
    """A node in the dependency graph."""

    key: DIKey
    dependencies: list[DependencyInfo]


class DependencyGraph:
    """
    Holds the merged bindings of a set of modules.

    Regular bindings are keyed: a later binding for the same key replaces the
    earlier one. Set elements accumulate under their ``set[T]`` key.
    """

    def __init__(self) -> None:
        super().__init__()
        self._bindings: dict[DIKey, Binding] = {}
        self._set_bindings: dict[DIKey, list[Binding]] = defaultdict(list)
        self._nodes: dict[DIKey, GraphNode] = {}
        self._validated = False

    def add_binding(self, binding: Binding) -> None:
        """Add a binding to the graph."""
        if binding.set_element:
            self._set_bindings[binding.key].append(binding)
        else:
            if binding.key in self._bindings:
                logger.debug("Overriding binding %s with %s", self._bindings[binding.key], binding)
                # Re-insert so declaration order reflects the effective binding
                del self._bindings[binding.key]
            self._bindings[binding.key] = binding

        self._validated = False

    def get_binding(self, key: DIKey) -> Binding | None:
        """Get a binding by key."""
        return self._bindings.get(key)

    def get_set_bindings(self, key: DIKey) -> list[Binding]:
        """Get all set element bindings for a key."""
        return list(self._set_bindings.get(key, []))

    def get_all_bindings(self) -> dict[DIKey, Binding]:
        """Get all regular bindings."""
        return self._bindings.copy()

    def set_keys(self) -> list[DIKey]:
        return list(self._set_bindings.keys())

    def has_key(self, key: DIKey) -> bool:
        return key in self._bindings or key in self._set_bindings

    def keys(self) -> list[DIKey]:
        """All keys of this graph in declaration order."""
        return list(self._bindings.keys()) + [key for key in self._set_bindings if key not in self._bindings]

    def validate(self, is_external: Callable[[DIKey], bool] = lambda key: False) -> None:
        """
        Validate the dependency graph.

        Args:
            is_external: Predicate for keys that are provided outside this graph,
                         e.g. by a parent locator.
        """
        if self._validated:
            return

        self._build_graph()
        self._check_missing_dependencies(is_external)
        self._check_circular_dependencies()
        self._validated = True

    def _build_graph(self) -> None:
        """Build the dependency graph nodes."""
        self._nodes.clear()

        for key, binding in self._bindings.items():
            self._nodes[key] = GraphNode(key, list(binding.functoid.dependencies))

        for key, elements in self._set_bindings.items():
            dependencies = [dep for element in elements for dep in element.functoid.dependencies]
            node = self._nodes.get(key)
            if node is None:
                self._nodes[key] = GraphNode(key, dependencies)
            else:
                node.dependencies.extend(dependencies)

    def _check_missing_dependencies(self, is_external: Callable[[DIKey], bool]) -> None:
        """Check for missing dependencies."""
        for node in self._nodes.values():
            for dep in node.dependencies:
                if self.has_key(dep.key) or is_external(dep.key):
                    continue
                if dep.has_default or dep.is_optional:
                    continue
                if AutoLoggerManager.should_auto_inject_logger(dep.key):
                    continue
                raise MissingBindingError(dep.key, node.key)

    def _check_circular_dependencies(self) -> None:
        """Check for circular dependencies using DFS."""
        WHITE = 0  # Not visited
        GRAY = 1  # Currently being processed
        BLACK = 2  # Completely processed

        colors: dict[DIKey, int] = defaultdict(lambda: WHITE)

        def dfs(key: DIKey, path: list[DIKey]) -> None:
            if colors[key] == GRAY:
                cycle_start = path.index(key)
                raise CircularDependencyError(path[cycle_start:] + [key])

            if colors[key] == BLACK:
                return

            colors[key] = GRAY
            path.append(key)

            node = self._nodes.get(key)
            if node:
                for dep in node.dependencies:
                    if dep.key in self._nodes:
                        dfs(dep.key, path)

            path.pop()
            colors[key] = BLACK

        for key in self._nodes:
            if colors[key] == WHITE:
                dfs(key, [])
