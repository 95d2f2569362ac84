"""
The bootstrap graph: an ephemeral graph used for discovery and module creation.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .core import BootstrapModule
from .injector import Injector
from .lifecycle import LifecycleManager, LifecycleMethodsFactory
from .locator_base import Locator
from .model import Stage
from .planner_input import PlannerInput
from .scanner import Scanner
from .scopes import ScopeRegistry

logger = logging.getLogger(__name__)


class InternalBootstrapModule(BootstrapModule):
    """Lifecycle services, the requested stage and the lazy singleton scopes."""

    def __init__(self, stage: Stage, scope_registry: ScopeRegistry):
        super().__init__()
        self.make(Stage).using().value(stage)
        self.make(LifecycleMethodsFactory).using().type(LifecycleMethodsFactory)
        self.make(LifecycleManager).using().type(LifecycleManager)
        self.include(scope_registry.module())


class ScannerModule(BootstrapModule):
    """Exposes the scanner used for discovery."""

    def __init__(self, scanner: Scanner):
        super().__init__()
        self.make(Scanner).using().value(scanner)


class BootstrapGraphBuilder:
    """Builds the bootstrap graph from bootstrap modules."""

    def __init__(self, scope_registry: ScopeRegistry):
        self._scope_registry = scope_registry

    def build(self, bootstrap_modules: Sequence[BootstrapModule], scanner: Scanner, stage: Stage) -> Locator:
        """
        Build the bootstrap graph.

        Internal bindings come first so bootstrap modules can override them,
        the scanner binding comes last so it always reflects the scanner in use.
        """
        modules = [
            InternalBootstrapModule(stage, self._scope_registry),
            *bootstrap_modules,
            ScannerModule(scanner),
        ]
        injector = Injector()
        locator = injector.produce(injector.plan(PlannerInput(modules, Stage.DEVELOPMENT)))
        logger.debug("Bootstrap graph built from %d modules with %d keys", len(modules), len(locator.keys()))
        return locator
