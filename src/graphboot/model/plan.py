"""
Plan - a validated graph together with everything needed to execute it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .bindings import Scope
from .graph import DependencyGraph
from .stage import Stage

if TYPE_CHECKING:
    from ..scopes import ScopeImpl

ProvisionListener = Callable[[Any], object]


@dataclass
class Plan:
    """
    A validated dependency graph ready to be turned into a Locator.

    Besides the bindings, a plan carries the custom scope implementations and
    provision listeners contributed by its modules, and the construction stage.
    """

    graph: DependencyGraph
    stage: Stage = Stage.DEVELOPMENT
    scopes: dict[Scope, ScopeImpl] = field(default_factory=dict)
    listeners: list[ProvisionListener] = field(default_factory=list)

    @classmethod
    def empty(cls) -> Plan:
        return cls(DependencyGraph())

