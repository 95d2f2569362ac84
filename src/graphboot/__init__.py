"""
Graphboot - two-phase object graph construction with custom scopes and lifecycle hooks.

An ephemeral bootstrap graph is built first to discover configuration from
markers on an entry-point class and from scanned ``@AutoBindSingleton``
classes. The final graph replays the bootstrap bindings together with every
application module.

This library provides:
- DSL for defining bindings (``ModuleDef``, ``BootstrapModule``)
- Lazy singleton scopes with coarse and per-key locking
- Markers mapping to suites, bootstrap modules and modules
- Lifecycle hooks (``@post_construct``, ``@validator``, ``@pre_destroy``)
"""

from .model import Binding, CircularDependencyError, DependencyGraph, DIKey, Id, MissingBindingError, Plan, Scope, Stage
from .errors import (
    ConfigurationError,
    DuplicateBindingError,
    GraphbootError,
    LifecycleValidationError,
    ProvisionError,
)
from .core import BootstrapModule, ModuleDef
from .injector import Injector
from .planner_input import PlannerInput
from .locator_base import Locator
from .scopes import FineGrainedLazySingletonScope, LazySingletonScope, ScopeRegistry
from .markers import AutoBindSingleton, Bootstrap, Marker, auto_bind_singleton, get_marker, markers_of
from .scanner import EmptyScanner, PackageScanner, Scanner, StaticScanner
from .lifecycle import (
    LifecycleManager,
    LifecycleMethodsFactory,
    LifecycleState,
    post_construct,
    pre_destroy,
    validator,
)
from .module_list import ModuleListBuilder, ModuleTransformer
from .replay import ReplayExclusions
from .builder import GraphBuilder, PostBuildAction, Suite, bootstrap
from .lifecycle_graph import BuildState, LifecycleGraph, run_post_build_actions

__all__ = [
    "AutoBindSingleton",
    "Binding",
    "Bootstrap",
    "BootstrapModule",
    "BuildState",
    "CircularDependencyError",
    "ConfigurationError",
    "DependencyGraph",
    "DIKey",
    "DuplicateBindingError",
    "EmptyScanner",
    "FineGrainedLazySingletonScope",
    "GraphBuilder",
    "GraphbootError",
    "Id",
    "Injector",
    "LazySingletonScope",
    "LifecycleGraph",
    "LifecycleManager",
    "LifecycleMethodsFactory",
    "LifecycleState",
    "LifecycleValidationError",
    "Locator",
    "Marker",
    "MissingBindingError",
    "ModuleDef",
    "ModuleListBuilder",
    "ModuleTransformer",
    "PackageScanner",
    "Plan",
    "PlannerInput",
    "PostBuildAction",
    "ProvisionError",
    "ReplayExclusions",
    "Scanner",
    "Scope",
    "ScopeRegistry",
    "Stage",
    "StaticScanner",
    "Suite",
    "auto_bind_singleton",
    "bootstrap",
    "get_marker",
    "markers_of",
    "post_construct",
    "pre_destroy",
    "run_post_build_actions",
    "validator",
]
