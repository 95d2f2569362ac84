"""
GraphBuilder - fluent configuration of a two-phase graph build.

Example:
    ```python
    graph = (
        GraphBuilder()
        .with_base_packages("billing")
        .with_module_classes(BillingModule)
        .in_stage(Stage.PRODUCTION)
        .build()
    )
    with graph:
        graph.locator.get(InvoiceService).run()
    ```
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

from .core import BootstrapModule, ModuleDef
from .model import Stage
from .module_list import ModuleListBuilder, ModuleTransformer
from .replay import ReplayExclusions
from .scanner import Scanner
from .scopes import ScopeRegistry

if TYPE_CHECKING:
    from .lifecycle_graph import LifecycleGraph
    from .locator_base import Locator

PostBuildAction = Callable[["Locator"], object]


class Suite(ABC):
    """
    A reusable bundle of builder configuration.

    Suites are usually referenced by markers and get applied to the builder
    before any module is collected.
    """

    @abstractmethod
    def configure(self, builder: GraphBuilder) -> None:
        """Apply this suite's settings to ``builder``."""


class GraphBuilder:
    """
    Collects everything needed to build a LifecycleGraph.

    Every ``with_*`` method appends to what was configured before and returns
    the builder itself. ``build()`` works on a copy, so one builder can build
    several independent graphs.
    """

    def __init__(self) -> None:
        self._base_packages: list[str] = []
        self._bootstrap_modules: list[BootstrapModule] = []
        self._module_list = ModuleListBuilder()
        self._transformers: list[ModuleTransformer] = []
        self._post_build_actions: list[PostBuildAction] = []
        self._ignore_classes: set[type] = set()
        self._auto_binding = True
        self._stage = Stage.PRODUCTION
        self._scanner: Scanner | None = None
        self._scope_registry: ScopeRegistry | None = None
        self._replay_exclusions = ReplayExclusions()
        self._entry_point: type | None = None
        self._external_module: ModuleDef | None = None

    def with_base_packages(self, *packages: str) -> GraphBuilder:
        """Packages the scanner searches for auto-bind classes."""
        self._base_packages.extend(packages)
        return self

    def with_bootstrap_modules(self, *modules: BootstrapModule) -> GraphBuilder:
        self._bootstrap_modules.extend(modules)
        return self

    def with_modules(self, *modules: ModuleDef) -> GraphBuilder:
        self._module_list.include(*modules)
        return self

    def with_module_classes(self, *module_classes: type[ModuleDef]) -> GraphBuilder:
        """Modules created through the bootstrap graph, with their constructor dependencies injected."""
        self._module_list.include(*module_classes)
        return self

    def excluding_module_classes(self, *module_classes: type[ModuleDef]) -> GraphBuilder:
        self._module_list.exclude(*module_classes)
        return self

    def with_module_transformers(self, *transformers: ModuleTransformer) -> GraphBuilder:
        """Functions rewriting the final module list, applied in order."""
        self._transformers.extend(transformers)
        return self

    def with_post_build_actions(self, *actions: PostBuildAction) -> GraphBuilder:
        """Callbacks run with the final locator once it is built, in order."""
        self._post_build_actions.extend(actions)
        return self

    def ignoring_classes(self, *classes: type) -> GraphBuilder:
        """Classes auto binding skips even when scanned."""
        self._ignore_classes.update(classes)
        return self

    def without_auto_binding(self) -> GraphBuilder:
        self._auto_binding = False
        return self

    def in_stage(self, stage: Stage) -> GraphBuilder:
        self._stage = stage
        return self

    def using_scanner(self, scanner: Scanner) -> GraphBuilder:
        self._scanner = scanner
        return self

    def with_scope_registry(self, registry: ScopeRegistry) -> GraphBuilder:
        self._scope_registry = registry
        return self

    def with_replay_exclusions(self, exclusions: ReplayExclusions) -> GraphBuilder:
        self._replay_exclusions = exclusions
        return self

    def for_entry_point(self, main: type, external_module: ModuleDef | None = None) -> GraphBuilder:
        """
        Build for an entry-point class.

        Markers on ``main`` contribute suites and modules. If ``main`` is a
        ModuleDef subclass it is installed as the last module.
        ``external_module`` holds bindings available to the constructors of
        marker-referenced suites and bootstrap modules.
        """
        self._entry_point = main
        self._external_module = external_module
        return self

    @property
    def base_packages(self) -> list[str]:
        return list(self._base_packages)

    @property
    def bootstrap_modules(self) -> list[BootstrapModule]:
        return list(self._bootstrap_modules)

    @property
    def module_list(self) -> ModuleListBuilder:
        return self._module_list

    @property
    def transformers(self) -> list[ModuleTransformer]:
        return list(self._transformers)

    @property
    def post_build_actions(self) -> list[PostBuildAction]:
        return list(self._post_build_actions)

    @property
    def ignored_classes(self) -> frozenset[type]:
        return frozenset(self._ignore_classes)

    @property
    def auto_binding(self) -> bool:
        return self._auto_binding

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def scanner(self) -> Scanner | None:
        return self._scanner

    @property
    def scope_registry(self) -> ScopeRegistry:
        return self._scope_registry if self._scope_registry is not None else ScopeRegistry.default()

    @property
    def replay_exclusions(self) -> ReplayExclusions:
        return self._replay_exclusions

    @property
    def entry_point(self) -> type | None:
        return self._entry_point

    @property
    def external_module(self) -> ModuleDef | None:
        return self._external_module

    def snapshot(self) -> GraphBuilder:
        """An independent copy: changes to either builder do not affect the other."""
        clone = copy.copy(self)
        clone._base_packages = list(self._base_packages)
        clone._bootstrap_modules = list(self._bootstrap_modules)
        clone._module_list = self._module_list.copy()
        clone._transformers = list(self._transformers)
        clone._post_build_actions = list(self._post_build_actions)
        clone._ignore_classes = set(self._ignore_classes)
        return clone

    def build(self) -> LifecycleGraph:
        """
        Run the two-phase build.

        Raises:
            ConfigurationError: On inconsistent markers, modules or auto-bind classes
            MissingBindingError: If a dependency of the final graph has no binding
            ProvisionError: If a module, suite or eager singleton fails to construct
        """
        from .lifecycle_graph import LifecycleGraph

        return LifecycleGraph(self.snapshot())


def bootstrap(main: type, external_module: ModuleDef | None = None, *bootstrap_modules: BootstrapModule) -> Locator:
    """
    Build the graph of an entry-point class and return its locator.

    Example:
        ```python
        @EnableBilling()
        class BillingApp(ModuleDef): ...

        locator = bootstrap(BillingApp)
        ```
    """
    builder = GraphBuilder().for_entry_point(main, external_module).with_bootstrap_modules(*bootstrap_modules)
    return builder.build().locator
