"""
The final graph: bootstrap bindings replayed together with every application module.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass

from .auto_bind import AutoBindModule
from .core import ModuleDef
from .injector import Injector
from .lifecycle import InternalLifecycleModule, LifecycleManager, LifecycleMethodsFactory
from .locator_base import Locator
from .model import DIKey, Scope, Stage
from .planner_input import PlannerInput
from .scopes import ScopeRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplayExclusions:
    """
    Raw types whose bootstrap bindings are not replayed into the final graph.

    The defaults:

    - ``ModuleDef``: modules configure graphs, they are not application services.
    - ``Locator``: the final graph binds its own handle, replaying would hand out
      the bootstrap graph instead.
    - ``Stage``: the final graph is built in its own stage.
    - ``logging.Logger`` and ``logging.LoggerAdapter``: loggers are injected per
      requesting class, a replayed one would carry the bootstrap requester's name.
    """

    types: tuple[type, ...] = (ModuleDef, Locator, Stage, logging.Logger, logging.LoggerAdapter)

    def excludes(self, key: DIKey) -> bool:
        raw = key.raw_type
        return isinstance(raw, type) and issubclass(raw, self.types)

    def with_types(self, *types: type) -> ReplayExclusions:
        return ReplayExclusions((*self.types, *types))


class BindingReplayModule(ModuleDef):
    """
    Re-declares the keys of another locator, delegating to its providers.

    Bindings are aliased rather than copied: each replayed key calls the source
    locator's scoped provider, so instances already built are reused and lazy
    or unscoped bindings keep their behavior.
    """

    def __init__(self, source: Locator, exclusions: ReplayExclusions):
        super().__init__()
        for key in source.keys():
            if exclusions.excludes(key):
                logger.debug("Not replaying %s", key)
                continue
            logger.debug("Replaying %s", key)
            builder = self.make(key.target_type).in_scope(Scope.UNSCOPED)
            if key.name is not None:
                builder = builder.named(key.name)
            builder.using().provider(source.get_provider(key))


class FinalGraphBuilder:
    """Builds the graph application code uses."""

    def __init__(self, scope_registry: ScopeRegistry, exclusions: ReplayExclusions):
        self._scope_registry = scope_registry
        self._exclusions = exclusions

    def build(
        self,
        bootstrap_locator: Locator,
        modules: Sequence[ModuleDef],
        component_classes: Sequence[type],
        ignore: Collection[type],
        stage: Stage,
    ) -> Locator:
        stage_module = ModuleDef()
        stage_module.make(Stage).using().value(stage)

        installed: list[ModuleDef] = [
            self._scope_registry.module(),
            stage_module,
            BindingReplayModule(bootstrap_locator, self._exclusions),
            InternalLifecycleModule(
                bootstrap_locator.get(LifecycleManager),
                bootstrap_locator.get(LifecycleMethodsFactory),
            ),
            *modules,
        ]
        explicit_keys = {binding.key for module in installed for binding in module.bindings if not binding.set_element}
        installed.append(AutoBindModule(component_classes, ignore, explicit_keys))

        injector = Injector()
        return injector.produce(injector.plan(PlannerInput(installed, stage)))
