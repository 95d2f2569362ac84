"""
Scanners discover marker-carrying classes before any graph exists.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Iterable, Iterator, Sequence
from types import ModuleType
from typing import Protocol, runtime_checkable

from .errors import ConfigurationError
from .markers import Marker, has_marker

logger = logging.getLogger(__name__)


@runtime_checkable
class Scanner(Protocol):
    """Finds the classes under some packages that carry any of the given markers."""

    def scan(self, base_packages: Sequence[str], markers: Sequence[type[Marker]]) -> set[type]: ...


def carries_any(cls: type, markers: Sequence[type[Marker]]) -> bool:
    return any(has_marker(cls, marker) for marker in markers)


class PackageScanner:
    """
    Imports every module below the base packages and inspects its classes.

    Only classes defined at module level in the scanned module itself are
    considered, so re-exported classes are reported once.
    """

    def scan(self, base_packages: Sequence[str], markers: Sequence[type[Marker]]) -> set[type]:
        found: set[type] = set()
        for package_name in base_packages:
            for module in self._iter_modules(package_name):
                for _, cls in inspect.getmembers(module, inspect.isclass):
                    if cls.__module__ == module.__name__ and carries_any(cls, markers):
                        found.add(cls)

        logger.debug("Scanned %s for %s: %d classes", list(base_packages), [m.__name__ for m in markers], len(found))
        return found

    @staticmethod
    def _import(name: str) -> ModuleType:
        try:
            return importlib.import_module(name)
        except ImportError as e:
            raise ConfigurationError(f"Cannot import {name} while scanning") from e

    def _iter_modules(self, package_name: str) -> Iterator[ModuleType]:
        package = self._import(package_name)
        yield package

        path = getattr(package, "__path__", None)
        if path is None:
            return
        for info in pkgutil.walk_packages(path, prefix=f"{package.__name__}."):
            yield self._import(info.name)


class StaticScanner:
    """
    Scanner over a fixed set of classes.

    Base packages are ignored: the given classes are the whole search space.
    """

    def __init__(self, classes: Iterable[type]):
        self._classes = tuple(classes)

    def scan(self, base_packages: Sequence[str], markers: Sequence[type[Marker]]) -> set[type]:  # noqa: ARG002
        return {cls for cls in self._classes if carries_any(cls, markers)}


class EmptyScanner:
    """Scanner that never finds anything, used when auto binding is disabled."""

    def scan(self, base_packages: Sequence[str], markers: Sequence[type[Marker]]) -> set[type]:  # noqa: ARG002
        return set()
