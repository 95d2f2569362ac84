"""
PlannerInput - everything the Injector needs to plan a graph.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .core import ModuleDef
from .model.stage import Stage


@dataclass(frozen=True)
class PlannerInput:
    """
    Modules to merge, in override order, and the stage to build the graph in.

    Example:
        ```python
        input = PlannerInput([base_module, overrides_module], Stage.PRODUCTION)
        locator = Injector().produce(Injector().plan(input))
        ```
    """

    modules: tuple[ModuleDef, ...] = field(default=())
    stage: Stage = Stage.DEVELOPMENT

    def __init__(self, modules: Iterable[ModuleDef] = (), stage: Stage = Stage.DEVELOPMENT):
        object.__setattr__(self, "modules", tuple(modules))
        object.__setattr__(self, "stage", stage)
