"""
Automatic injection of ``logging.Logger`` dependencies.

An unnamed ``logging.Logger`` dependency that has no binding resolves to a
logger named after the class or function requesting it, so components can
declare ``logger: logging.Logger`` without any module setup.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .model.keys import DIKey


class AutoLoggerManager:
    """Decides when a logger is auto-injected and which logger it is."""

    @staticmethod
    def should_auto_inject_logger(key: DIKey) -> bool:
        """Only unnamed ``logging.Logger`` keys are auto-injected."""
        return key.target_type is logging.Logger and key.name is None

    @staticmethod
    def logger_name_for(requester: Callable[..., Any] | None) -> str:
        if requester is None:
            return "__unknown__"
        module = getattr(requester, "__module__", None)
        qualname = getattr(requester, "__qualname__", None)
        if not qualname:
            return module or "__unknown__"
        # Locally defined classes carry "<locals>" in their qualname
        qualname = qualname.replace(".<locals>", "")
        return f"{module}.{qualname}" if module else qualname

    @staticmethod
    def create_logger(requester: Callable[..., Any] | None) -> logging.Logger:
        return logging.getLogger(AutoLoggerManager.logger_name_for(requester))
