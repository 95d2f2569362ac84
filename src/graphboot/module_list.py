"""
Collection and instantiation of the plain modules of the final graph.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from .core import ModuleDef
from .locator_base import Locator

logger = logging.getLogger(__name__)

ModuleTransformer = Callable[[list[ModuleDef]], Iterable[ModuleDef]]


class ModuleListBuilder:
    """
    Ordered list of modules, given as instances or as classes.

    Classes are instantiated with a locator when the list is built, so their
    constructors can receive injected dependencies. A class included more
    than once is created once, at its first position.
    """

    def __init__(self) -> None:
        self._includes: list[ModuleDef | type[ModuleDef]] = []
        self._excludes: set[type[ModuleDef]] = set()

    def include(self, *modules: ModuleDef | type[ModuleDef]) -> ModuleListBuilder:
        for module in modules:
            is_module_class = isinstance(module, type) and issubclass(module, ModuleDef)
            if not (is_module_class or isinstance(module, ModuleDef)):
                raise TypeError(f"{module!r} is neither a ModuleDef nor a ModuleDef subclass")
            self._includes.append(module)
        return self

    def exclude(self, *module_classes: type[ModuleDef]) -> ModuleListBuilder:
        self._excludes.update(module_classes)
        return self

    def extend(self, other: ModuleListBuilder) -> ModuleListBuilder:
        self._includes.extend(other._includes)
        self._excludes.update(other._excludes)
        return self

    def copy(self) -> ModuleListBuilder:
        return ModuleListBuilder().extend(self)

    @property
    def includes(self) -> list[ModuleDef | type[ModuleDef]]:
        return list(self._includes)

    def build(self, locator: Locator, transformers: Sequence[ModuleTransformer] = ()) -> list[ModuleDef]:
        """
        Instantiate the modules in order and run the transformers over the result.

        Raises:
            ProvisionError: If a module class cannot be created
        """
        modules: list[ModuleDef] = []
        created: set[type[ModuleDef]] = set()

        for entry in self._includes:
            module_class = entry if isinstance(entry, type) else type(entry)
            if module_class in self._excludes:
                logger.debug("Excluding module %s", module_class.__qualname__)
                continue

            if isinstance(entry, ModuleDef):
                modules.append(entry)
            elif entry not in created:
                created.add(entry)
                modules.append(locator.create(entry))

        return apply_transformers(modules, transformers)


def apply_transformers(modules: list[ModuleDef], transformers: Sequence[ModuleTransformer]) -> list[ModuleDef]:
    """Run transformers left to right, each one over the previous one's output."""
    for transformer in transformers:
        modules = list(transformer(modules))
    return modules
