# src/ascend/storage/__init__.py
"""
Goal-record storage backends.

All backends satisfy :class:`GoalRecordStore`; use :func:`create_store` to
build the one selected by a StoreConfig.
"""

from typing import Any

from ..exceptions import ConfigError
from .base import GoalRecordStore
from .http_store import HttpGoalStore
from .json_store import JsonGoalStore
from .memory import InMemoryGoalStore
from .report import build_progress_report


def create_store(config: Any) -> GoalRecordStore:
    """
    Instantiate the record store named by ``config.backend``.

    Args:
        config: A StoreConfig instance.

    Raises:
        ConfigError: For an unknown backend or missing settings.
    """
    backend = config.backend
    if backend == "memory":
        return InMemoryGoalStore()
    if backend == "json":
        return JsonGoalStore(config.path)
    if backend == "http":
        if not config.base_url:
            raise ConfigError("Store backend 'http' requires 'base_url'.")
        return HttpGoalStore(config.base_url, timeout=config.timeout_seconds)
    raise ConfigError(f"Unknown goal store backend: '{backend}'")


__all__ = [
    "GoalRecordStore",
    "HttpGoalStore",
    "InMemoryGoalStore",
    "JsonGoalStore",
    "build_progress_report",
    "create_store",
]
