"""
Auto binding of scanned ``@AutoBindSingleton`` classes.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, field

from .core import ModuleDef
from .errors import ConfigurationError, DuplicateBindingError
from .markers import AutoBindSingleton, get_marker
from .model import DIKey, Scope
from .scanner import Scanner

logger = logging.getLogger(__name__)


def sorted_types(types: Iterable[type]) -> list[type]:
    """Order classes deterministically by module and qualified name."""
    return sorted(types, key=lambda cls: (cls.__module__, cls.__qualname__))


@dataclass
class AutoBindFindings:
    module_classes: list[type[ModuleDef]] = field(default_factory=list)
    component_classes: list[type] = field(default_factory=list)


class AutoBindCollector:
    """Splits scanned auto-bind classes into module classes and components."""

    def __init__(self, marker_type: type[AutoBindSingleton] = AutoBindSingleton):
        self._marker_type = marker_type

    def collect(self, scanner: Scanner, base_packages: Sequence[str], ignore: Collection[type]) -> AutoBindFindings:
        """
        Scan for auto-bind classes.

        Raises:
            ConfigurationError: If a module class sets base_class, value or multiple
        """
        findings = AutoBindFindings()

        for cls in sorted_types(scanner.scan(base_packages, [self._marker_type])):
            if cls in ignore:
                logger.debug("Ignoring auto-bind class %s", cls.__qualname__)
                continue

            marker = get_marker(cls, self._marker_type)
            if marker is None:
                continue

            if issubclass(cls, ModuleDef):
                if not marker.is_plain:
                    raise ConfigurationError(
                        f"Auto-bind module {cls.__module__}.{cls.__qualname__} cannot set base_class, value or multiple"
                    )
                logger.info("Found auto-bind module %s", cls.__qualname__)
                findings.module_classes.append(cls)
            else:
                findings.component_classes.append(cls)

        return findings


class AutoBindModule(ModuleDef):
    """
    Binds auto-bind components as singletons.

    Keys that already have an explicit binding are skipped; two components
    claiming the same key are a configuration error.
    """

    def __init__(
        self,
        component_classes: Iterable[type],
        ignore: Collection[type] = (),
        explicit_keys: Collection[DIKey] = (),
    ):
        super().__init__()
        claimed: dict[DIKey, type] = {}

        for cls in component_classes:
            if cls in ignore:
                continue

            marker = get_marker(cls, AutoBindSingleton) or AutoBindSingleton()
            target = marker.bound_type or cls

            if marker.multiple:
                self.many(target).add_type(cls)
                continue

            key = DIKey(target)
            if key in explicit_keys:
                logger.debug("Not auto-binding %s: %s is bound explicitly", cls.__qualname__, key)
                continue
            if key in claimed:
                raise DuplicateBindingError(key, claimed[key], cls)

            claimed[key] = cls
            scope = Scope.EAGER_SINGLETON if marker.eager else Scope.SINGLETON
            self.make(target).in_scope(scope).using().type(cls)
