"""
Declarative markers and their resolution.

A marker is an instance of a ``Marker`` subclass applied to a class as a
decorator. Marker types can carry a ``Bootstrap`` descriptor that maps the
marker to exactly one role: a suite, a bootstrap module or a plain module.

Example:
    ```python
    @Bootstrap(bootstrap_module=MetricsBootstrapModule)
    @dataclass(frozen=True)
    class EnableMetrics(Marker):
        prefix: str = "app"

    @EnableMetrics(prefix="billing")
    class BillingApp:
        ...
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from .core import BootstrapModule, ModuleDef
from .errors import ConfigurationError

if TYPE_CHECKING:
    from .builder import Suite
    from .locator_base import Locator

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type)

_MARKERS_ATTR = "__graphboot_markers__"
_BOOTSTRAP_ATTR = "__graphboot_bootstrap__"


class Marker:
    """
    Base class for declarative type-level markers.

    Applying a marker instance to a class records it on that class only;
    markers are not inherited by subclasses.
    """

    def __call__(self, cls: C) -> C:
        # Decorators apply bottom-up, prepend to keep top-to-bottom source order
        existing = vars(cls).get(_MARKERS_ATTR, ())
        setattr(cls, _MARKERS_ATTR, (self, *existing))
        return cls


def markers_of(cls: type) -> tuple[Marker, ...]:
    """Markers declared directly on ``cls``, in declaration order."""
    return tuple(vars(cls).get(_MARKERS_ATTR, ()))


M = TypeVar("M", bound=Marker)


def get_marker(cls: type, marker_type: type[M]) -> M | None:
    """The first marker of ``marker_type`` declared on ``cls``, if any."""
    for marker in markers_of(cls):
        if isinstance(marker, marker_type):
            return marker
    return None


def has_marker(cls: type, marker_type: type[Marker]) -> bool:
    return get_marker(cls, marker_type) is not None


@dataclass(frozen=True)
class SuiteRole:
    marker: Marker
    suite: type[Suite]


@dataclass(frozen=True)
class BootstrapModuleRole:
    marker: Marker
    module: type[BootstrapModule]


@dataclass(frozen=True)
class ModuleRole:
    marker: Marker
    module: type[ModuleDef]


MarkerRole = SuiteRole | BootstrapModuleRole | ModuleRole | None


@dataclass(frozen=True)
class Bootstrap:
    """
    Descriptor mapping a marker type to at most one bootstrap role.

    Used as a decorator on the marker class.
    """

    suite: type[Suite] | None = None
    bootstrap_module: type[BootstrapModule] | None = None
    module: type[ModuleDef] | None = None

    def __call__(self, marker_type: C) -> C:
        setattr(marker_type, _BOOTSTRAP_ATTR, self)
        return marker_type

    @staticmethod
    def of(marker_type: type) -> Bootstrap | None:
        descriptor = vars(marker_type).get(_BOOTSTRAP_ATTR)
        return descriptor if isinstance(descriptor, Bootstrap) else None

    def role(self, marker: Marker) -> MarkerRole:
        """
        Resolve the role of ``marker``.

        Raises:
            ConfigurationError: If more than one role is declared
        """
        declared = [
            name
            for name, target in (
                ("suite", self.suite),
                ("bootstrap_module", self.bootstrap_module),
                ("module", self.module),
            )
            if target is not None
        ]
        if len(declared) > 1:
            raise ConfigurationError(
                f"Marker {type(marker).__qualname__} declares more than one bootstrap role: {', '.join(declared)}"
            )

        if self.suite is not None:
            return SuiteRole(marker, self.suite)
        if self.bootstrap_module is not None:
            return BootstrapModuleRole(marker, self.bootstrap_module)
        if self.module is not None:
            return ModuleRole(marker, self.module)
        return None


class MarkerValueModule(BootstrapModule):
    """Makes a marker instance injectable by its own type."""

    def __init__(self, marker: Marker):
        super().__init__()
        self.marker = marker
        self.make(type(marker)).using().value(marker)


@dataclass
class ResolvedMarkers:
    """Roles found on an entry point, in marker declaration order."""

    suites: list[type[Suite]] = field(default_factory=list)
    bootstrap_modules: list[type[BootstrapModule]] = field(default_factory=list)
    module_classes: list[type[ModuleDef]] = field(default_factory=list)
    augmentations: list[BootstrapModule] = field(default_factory=list)
    markers: list[Marker] = field(default_factory=list)


class MarkerResolver:
    """Converts the markers of an entry point into suites and modules."""

    def resolve(self, markers: Iterable[Marker]) -> ResolvedMarkers:
        resolved = ResolvedMarkers()

        for marker in markers:
            descriptor = Bootstrap.of(type(marker))
            if descriptor is None:
                continue

            logger.info("Found bootstrap marker %s", type(marker).__qualname__)
            role = descriptor.role(marker)
            match role:
                case SuiteRole(suite=suite):
                    logger.info("Adding suite %s", suite.__qualname__)
                    _append_once(resolved.suites, suite)
                case BootstrapModuleRole(module=module):
                    logger.info("Adding bootstrap module %s", module.__qualname__)
                    _append_once(resolved.bootstrap_modules, module)
                    resolved.augmentations.append(MarkerValueModule(marker))
                case ModuleRole(module=module):
                    logger.info("Adding module %s", module.__qualname__)
                    _append_once(resolved.module_classes, module)
                    resolved.augmentations.append(MarkerValueModule(marker))
                case None:
                    pass

            resolved.markers.append(marker)

        return resolved

    def marker_locator(self, resolved: ResolvedMarkers, external_module: ModuleDef | None = None) -> Locator:
        """
        Build the ephemeral graph suites and bootstrap modules are created with.

        It holds the external bindings and every marker value, so their
        constructors can inject either.
        """
        from .injector import Injector
        from .planner_input import PlannerInput

        modules: list[ModuleDef] = [] if external_module is None else [external_module]
        modules.extend(MarkerValueModule(marker) for marker in resolved.markers)

        injector = Injector()
        return injector.produce(injector.plan(PlannerInput(modules)))


@dataclass(frozen=True)
class AutoBindSingleton(Marker):
    """
    Marks a class for automatic singleton binding in the final graph.

    ``base_class`` binds the class under a supertype instead of itself,
    ``value`` is a legacy alias for ``base_class`` and ``multiple`` contributes
    the instance to ``set[base_class]``. A ``ModuleDef`` subclass carrying this
    marker is installed as a module and must not set any of them.
    """

    base_class: type | None = None
    value: type | None = None
    multiple: bool = False
    eager: bool = False

    @property
    def bound_type(self) -> type | None:
        return self.base_class or self.value

    @property
    def is_plain(self) -> bool:
        return self.base_class is None and self.value is None and not self.multiple


auto_bind_singleton = AutoBindSingleton()


def _append_once(items: list[Any], item: Any) -> None:
    if item not in items:
        items.append(item)
