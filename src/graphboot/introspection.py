"""
Signature introspection for extracting dependency information from callables.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from .model.keys import DIKey, Id


@dataclass(frozen=True)
class DependencyInfo:
    """A single constructor or function parameter that must be injected."""

    name: str
    type_hint: Any
    dependency_name: str | None
    is_optional: bool
    default_value: Any

    @property
    def key(self) -> DIKey:
        return DIKey(self.type_hint, self.dependency_name)

    @property
    def has_default(self) -> bool:
        return self.default_value is not inspect.Parameter.empty


class SignatureIntrospector:
    """Extracts dependency information from classes and functions."""

    @staticmethod
    def extract_from_callable(func: Callable[..., Any]) -> list[DependencyInfo]:
        """
        Extract the injectable parameters of a class constructor or a function.

        Parameters without a usable type hint, string forward references that
        cannot be resolved, and ``*args``/``**kwargs`` are skipped.
        """
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            return []

        hints = SignatureIntrospector._type_hints(func)
        dependencies: list[DependencyInfo] = []

        for param in signature.parameters.values():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            hint = hints.get(param.name, param.annotation)
            if hint is inspect.Parameter.empty or isinstance(hint, str):
                continue

            type_hint, dependency_name = SignatureIntrospector._unwrap_annotated(hint)
            type_hint, is_optional = SignatureIntrospector._unwrap_optional(type_hint)

            dependencies.append(
                DependencyInfo(
                    name=param.name,
                    type_hint=type_hint,
                    dependency_name=dependency_name,
                    is_optional=is_optional,
                    default_value=param.default,
                )
            )

        return dependencies

    @staticmethod
    def _type_hints(func: Callable[..., Any]) -> dict[str, Any]:
        target = func.__init__ if inspect.isclass(func) else func  # type: ignore[misc]
        try:
            return get_type_hints(target, include_extras=True)
        except (NameError, TypeError, AttributeError):
            # Forward references to locals cannot be resolved, fall back to raw annotations
            return {}

    @staticmethod
    def _unwrap_annotated(hint: Any) -> tuple[Any, str | None]:
        if get_origin(hint) is not Annotated:
            return hint, None

        base, *metadata = get_args(hint)
        for item in metadata:
            if isinstance(item, Id):
                return base, item.value
        return base, None

    @staticmethod
    def _unwrap_optional(hint: Any) -> tuple[Any, bool]:
        if get_origin(hint) not in (Union, types.UnionType):
            return hint, False

        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) == 1 and len(args) != len(get_args(hint)):
            return args[0], True
        return hint, False
