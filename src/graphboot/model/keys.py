"""
DIKey implementation for dependency injection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, get_origin


@dataclass(frozen=True)
class DIKey:
    """A key that identifies a specific dependency in the object graph."""

    target_type: Any
    name: str | None = None

    @property
    def raw_type(self) -> Any:
        """The unparameterized type of this key, e.g. ``set`` for ``set[Plugin]``."""
        return get_origin(self.target_type) or self.target_type

    def __str__(self) -> str:
        name_str = f" @{self.name}" if self.name else ""
        type_name = getattr(self.target_type, "__name__", str(self.target_type))
        if get_origin(self.target_type) is not None:
            type_name = str(self.target_type)
        return f"{type_name}{name_str}"

    def __hash__(self) -> int:
        return hash((self.target_type, self.name))


@dataclass(frozen=True)
class Id:
    """
    Name qualifier for constructor parameters.

    Example:
        ```python
        class Service:
            def __init__(self, url: Annotated[str, Id("db-url")]):
                ...
        ```
    """

    value: str
