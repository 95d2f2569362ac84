"""
LifecycleGraph - the result of a two-phase build.

The build runs through these states, strictly in order:

    UNCONFIGURED -> MARKERS_RESOLVED -> BOOTSTRAP_GRAPH_BUILT
        -> MODULES_COLLECTED -> FINAL_GRAPH_BUILT -> ACTIONS_RUN

Any failure aborts the build; no graph is returned.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

from .auto_bind import AutoBindCollector, AutoBindFindings
from .bootstrap_graph import BootstrapGraphBuilder
from .core import ModuleDef
from .lifecycle import LifecycleManager
from .locator_base import Locator
from .markers import MarkerResolver, ResolvedMarkers, markers_of
from .module_list import ModuleListBuilder
from .replay import FinalGraphBuilder
from .scanner import EmptyScanner, PackageScanner, Scanner

if TYPE_CHECKING:
    from .builder import GraphBuilder, PostBuildAction

logger = logging.getLogger(__name__)


class BuildState(Enum):
    UNCONFIGURED = 0
    MARKERS_RESOLVED = 1
    BOOTSTRAP_GRAPH_BUILT = 2
    MODULES_COLLECTED = 3
    FINAL_GRAPH_BUILT = 4
    ACTIONS_RUN = 5


def run_post_build_actions(actions: Sequence[PostBuildAction], locator: Locator) -> None:
    """Run actions in order. The first failure propagates and later actions do not run."""
    for action in actions:
        action(locator)


class LifecycleGraph:
    """
    Final object graph together with its lifecycle manager.

    Used as a context manager, the lifecycle is started on entry and
    stopped on exit:

        ```python
        with GraphBuilder().with_modules(AppModule()).build() as graph:
            graph.locator.get(Server).serve()
        ```
    """

    def __init__(self, builder: GraphBuilder):
        self._state = BuildState.UNCONFIGURED
        try:
            self._build(builder)
        except Exception:
            logger.error("Graph build failed after state %s", self._state.name)
            raise

    def _build(self, builder: GraphBuilder) -> None:
        resolver = MarkerResolver()
        main = builder.entry_point
        resolved = resolver.resolve(markers_of(main)) if main is not None else ResolvedMarkers()

        marker_locator = resolver.marker_locator(resolved, builder.external_module)
        for suite_class in resolved.suites:
            marker_locator.create(suite_class).configure(builder)
        bootstrap_modules = [
            *resolved.augmentations,
            *(marker_locator.create(module) for module in resolved.bootstrap_modules),
            *builder.bootstrap_modules,
        ]
        self._advance(BuildState.MARKERS_RESOLVED)

        self._scanner = self._select_scanner(builder)
        findings = (
            AutoBindCollector().collect(self._scanner, builder.base_packages, builder.ignored_classes)
            if builder.auto_binding
            else AutoBindFindings()
        )
        bootstrap_locator = BootstrapGraphBuilder(builder.scope_registry).build(
            bootstrap_modules, self._scanner, builder.stage
        )
        self._advance(BuildState.BOOTSTRAP_GRAPH_BUILT)

        module_list = ModuleListBuilder().include(*resolved.module_classes).extend(builder.module_list)
        for module in bootstrap_modules:
            module_list.include(*module.included_modules)
        module_list.include(*findings.module_classes)
        if isinstance(main, type) and issubclass(main, ModuleDef):
            module_list.include(main)
        modules = module_list.build(bootstrap_locator, builder.transformers)
        self._advance(BuildState.MODULES_COLLECTED)

        self._lifecycle_manager = bootstrap_locator.get(LifecycleManager)
        self._locator = FinalGraphBuilder(builder.scope_registry, builder.replay_exclusions).build(
            bootstrap_locator,
            modules,
            findings.component_classes,
            builder.ignored_classes,
            builder.stage,
        )
        self._advance(BuildState.FINAL_GRAPH_BUILT)

        run_post_build_actions(builder.post_build_actions, self._locator)
        self._advance(BuildState.ACTIONS_RUN)

    @staticmethod
    def _select_scanner(builder: GraphBuilder) -> Scanner:
        if builder.scanner is not None:
            return builder.scanner
        return PackageScanner() if builder.auto_binding else EmptyScanner()

    def _advance(self, state: BuildState) -> None:
        if state.value != self._state.value + 1:
            raise RuntimeError(f"Illegal build transition {self._state.name} -> {state.name}")
        logger.debug("Build state %s -> %s", self._state.name, state.name)
        self._state = state

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def locator(self) -> Locator:
        return self._locator

    @property
    def lifecycle_manager(self) -> LifecycleManager:
        return self._lifecycle_manager

    @property
    def scanner(self) -> Scanner:
        return self._scanner

    def create_child_graph(self, *modules: ModuleDef) -> Locator:
        """
        Create a child locator on top of the final graph.

        Deprecated: use ``graph.locator.create_child(modules)``.
        """
        warnings.warn(
            "LifecycleGraph.create_child_graph() is deprecated, use locator.create_child() instead",
            DeprecationWarning,
            stacklevel=2,
        )
        return self._locator.create_child(modules)

    def __enter__(self) -> LifecycleGraph:
        self._lifecycle_manager.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._lifecycle_manager.stop()
