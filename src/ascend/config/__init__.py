# src/ascend/config/__init__.py
"""
Configuration module for the Ascend goal tracker.

This package handles loading and validating configuration, layering the
packaged ``default_config.toml``, an optional user file, ``ASCEND_``
environment variables and explicit overrides with the `confy` library, then
validating the result with Pydantic models.

Configuration files:
    - default_config.toml: Packaged defaults
    - User config: ~/.config/ascend/config.toml
    - Custom config: load_config(config_file_path=...)

Environment variables:
    - Prefix: ASCEND_
    - Nested keys use double underscores: ASCEND_REMINDERS__WINDOW_SECONDS
"""

from .loader import load_config, load_default_config
from .tracker_config import (
    HistoryConfig,
    RemindersConfig,
    SchedulerConfig,
    StoreConfig,
    SuggestionsConfig,
    TrackerConfig,
)

__all__ = [
    "HistoryConfig",
    "RemindersConfig",
    "SchedulerConfig",
    "StoreConfig",
    "SuggestionsConfig",
    "TrackerConfig",
    "load_config",
    "load_default_config",
]
