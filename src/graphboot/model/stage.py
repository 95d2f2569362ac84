"""
Construction stages controlling how eagerly a graph instantiates its bindings.
"""

from enum import Enum


class Stage(Enum):
    """
    Construction stage passed through to the injector.

    TOOL validates the graph without constructing anything, DEVELOPMENT only
    constructs eager singletons up front, PRODUCTION constructs every singleton
    up front. Lazy singleton scopes are never constructed up front.
    """

    TOOL = "tool"
    DEVELOPMENT = "development"
    PRODUCTION = "production"
