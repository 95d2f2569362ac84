"""
Injector - Stateless dependency injection container that produces Plans from PlannerInput.
"""

from __future__ import annotations

from .errors import ConfigurationError
from .locator_base import Locator
from .locator_impl import LocatorImpl
from .model import DependencyGraph, DIKey, Plan
from .planner_input import PlannerInput


class Injector:
    """
    Stateless dependency injection container that produces Plans from PlannerInput.

    The Injector builds and validates dependency graphs but does not manage
    instances or store state. It produces Plans that can be executed by Locators.

    Supports locator inheritance: when a parent locator is provided, child locators
    will check parent locators for missing dependencies before failing, and inherit
    the parent's custom scopes and provision listeners.
    """

    def __init__(self, parent_locator: Locator | None = None):
        """
        Create a new Injector.

        Args:
            parent_locator: Optional parent locator for dependency inheritance.
        """
        self._parent_locator = parent_locator if parent_locator is not None else Locator.empty()

    def plan(self, input: PlannerInput) -> Plan:
        """
        Create a validated Plan from a PlannerInput.

        Bindings are merged in module order, so a later module overrides the
        bindings of an earlier one.

        Raises:
            MissingBindingError: If a dependency has no binding
            CircularDependencyError: If the bindings form a cycle
            ConfigurationError: If a binding uses a scope with no implementation
        """
        graph = DependencyGraph()
        scopes = self._parent_locator.scopes()
        listeners = self._parent_locator.listeners()

        for module in input.modules:
            for binding in module.bindings:
                graph.add_binding(binding)
            scopes.update(module.scope_bindings)
            listeners.extend(module.listeners)

        graph.validate(self._is_external)

        for binding in graph.get_all_bindings().values():
            if not binding.scope.is_builtin and binding.scope not in scopes:
                raise ConfigurationError(
                    f"No scope implementation is bound for {binding.scope.value}, required by {binding.key}"
                )

        return Plan(graph, input.stage, scopes, listeners)

    def produce(self, plan: Plan) -> Locator:
        """
        Create a Locator executing the Plan.

        Singletons required by the plan's stage are constructed before returning.
        """
        locator = LocatorImpl(plan, self._parent_locator)
        locator.instantiate_eagerly()
        return locator

    def _is_external(self, key: DIKey) -> bool:
        return key == DIKey(Locator) or self._parent_locator.has_key(key)

    @classmethod
    def inherit(cls, parent_locator: Locator) -> Injector:
        """Create a child Injector that inherits from a parent locator."""
        return cls(parent_locator)
