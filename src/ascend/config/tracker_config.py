# src/ascend/config/tracker_config.py
"""
Goal tracker configuration models.

This module defines Pydantic models for every configuration section of the
tracker. They give type-safe loading, validation with sensible defaults,
and a single place documenting each knob.

The configuration hierarchy:
    TrackerConfig (root)
    ├── StoreConfig        - Goal-record store backend
    ├── HistoryConfig      - Progress history sampling and persistence
    ├── RemindersConfig    - Reminder sweep timing
    ├── SchedulerConfig    - Heartbeat tick rate
    ├── SuggestionsConfig  - AI sub-goal suggestions
    └── logging            - Passed through to ascend.logging_config

Usage:
    >>> from ascend.config.tracker_config import TrackerConfig
    >>> config = TrackerConfig()  # All defaults
    >>> config.reminders.window_seconds
    60.0
"""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

# =============================================================================
# STORE CONFIGURATION
# =============================================================================


class StoreConfig(BaseModel):
    """
    Configuration for the goal-record store.

    Examples:
        >>> StoreConfig().backend
        'json'
        >>> StoreConfig(backend="http", base_url="http://localhost:3001/api/goals").timeout_seconds
        10.0
    """

    backend: Literal["memory", "json", "http"] = Field(
        default="json",
        description="Store backend: in-process memory, local JSON file, or remote REST API",
    )
    path: str = Field(
        default="~/.local/share/ascend/goals.json",
        description="Goals file for the 'json' backend. Tilde and environment variables are expanded.",
    )
    base_url: str = Field(
        default="",
        description="Collection URL for the 'http' backend. Supports ${ENV_VAR} substitution.",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=300.0,
        description="Per-request timeout for the 'http' backend",
    )

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: str) -> str:
        return os.path.expanduser(os.path.expandvars(v))

    @field_validator("base_url")
    @classmethod
    def expand_base_url(cls, v: str) -> str:
        return os.path.expandvars(v)

    @model_validator(mode="after")
    def check_http_url(self) -> StoreConfig:
        if self.backend == "http" and not self.base_url:
            raise ValueError("store.base_url is required when store.backend is 'http'")
        return self


# =============================================================================
# HISTORY CONFIGURATION
# =============================================================================


class HistoryConfig(BaseModel):
    """
    Configuration for progress history sampling.

    One debounce threshold serves both the durable slot and the in-session
    series.

    Examples:
        >>> config = HistoryConfig()
        >>> config.max_entries
        50
        >>> config.progress_threshold
        1.0
    """

    enabled: bool = Field(default=True, description="Sample progress history")
    storage_path: str = Field(
        default="~/.local/share/ascend/progress_history.json",
        description="Durable slot holding the snapshot series",
    )
    max_entries: int = Field(default=50, ge=1, le=10_000, description="Snapshots kept; oldest age out")
    min_interval_seconds: float = Field(
        default=60.0,
        ge=0.0,
        description="Elapsed time after which an unchanged sample is still recorded",
    )
    progress_threshold: float = Field(
        default=1.0,
        ge=0.0,
        le=100.0,
        description="Progress delta (percentage points) that forces a sample",
    )
    sample_interval_seconds: float = Field(
        default=60.0,
        ge=1.0,
        description="How often the scheduler samples progress",
    )

    @field_validator("storage_path")
    @classmethod
    def expand_storage_path(cls, v: str) -> str:
        return os.path.expanduser(os.path.expandvars(v))


# =============================================================================
# REMINDERS CONFIGURATION
# =============================================================================


class RemindersConfig(BaseModel):
    """
    Configuration for the reminder sweep.

    The trailing window must be longer than the scan interval, otherwise a
    delayed sweep can miss a reminder.

    Examples:
        >>> RemindersConfig().scan_interval_seconds
        10.0
    """

    enabled: bool = Field(default=True, description="Run the reminder sweep")
    scan_interval_seconds: float = Field(default=10.0, gt=0.0, le=3600.0, description="Sweep interval")
    window_seconds: float = Field(default=60.0, gt=0.0, le=86_400.0, description="Trailing firing window")

    @model_validator(mode="after")
    def check_window_exceeds_interval(self) -> RemindersConfig:
        if self.window_seconds <= self.scan_interval_seconds:
            raise ValueError(
                f"reminders.window_seconds ({self.window_seconds}) must be greater than "
                f"reminders.scan_interval_seconds ({self.scan_interval_seconds})"
            )
        return self


# =============================================================================
# SCHEDULER CONFIGURATION
# =============================================================================


class SchedulerConfig(BaseModel):
    """Heartbeat scheduler settings."""

    tick_seconds: float = Field(default=1.0, ge=0.05, le=60.0, description="Scheduler tick rate")


# =============================================================================
# SUGGESTIONS CONFIGURATION
# =============================================================================


class SuggestionsConfig(BaseModel):
    """
    Configuration for AI sub-goal suggestions.

    Examples:
        >>> SuggestionsConfig().model
        'gemini-2.5-flash'
    """

    enabled: bool = Field(default=True, description="Offer AI sub-goal suggestions")
    provider: Literal["gemini"] = Field(default="gemini", description="Suggestion provider")
    model: str = Field(default="gemini-2.5-flash", description="Model used for suggestions")
    api_key: str = Field(
        default="",
        description=(
            "Provider API key. Supports ${ENV_VAR} substitution; when empty, "
            "GEMINI_API_KEY and then API_KEY are read from the environment."
        ),
    )
    min_items: int = Field(default=3, ge=1, le=20, description="Fewest sub-goals to ask for")
    max_items: int = Field(default=5, ge=1, le=20, description="Most sub-goals to ask for and keep")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0, description="Sampling temperature")

    @field_validator("api_key")
    @classmethod
    def resolve_api_key(cls, v: str) -> str:
        v = os.path.expandvars(v)
        if v and not v.startswith("${"):
            return v
        return os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY") or ""

    @model_validator(mode="after")
    def check_item_bounds(self) -> SuggestionsConfig:
        if self.min_items > self.max_items:
            raise ValueError("suggestions.min_items must not exceed suggestions.max_items")
        return self


# =============================================================================
# ROOT CONFIGURATION
# =============================================================================


class TrackerConfig(BaseModel):
    """Root configuration for the goal tracker."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    reminders: RemindersConfig = Field(default_factory=RemindersConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    suggestions: SuggestionsConfig = Field(default_factory=SuggestionsConfig)
    logging: dict[str, Any] = Field(default_factory=dict, description="Logging section")

    @model_validator(mode="after")
    def check_tick_rate(self) -> TrackerConfig:
        if self.scheduler.tick_seconds > self.reminders.scan_interval_seconds:
            raise ValueError("scheduler.tick_seconds must not exceed reminders.scan_interval_seconds")
        return self
