# src/ascend/utils/__init__.py
"""Small shared helpers for the Ascend package."""

from .clock import (
    MS_PER_DAY,
    MS_PER_SECOND,
    day_bounds_ms,
    from_ms,
    now_ms,
    resolve_now,
    start_of_day,
    sunday_weekday,
    to_ms,
)

__all__ = [
    "MS_PER_DAY",
    "MS_PER_SECOND",
    "day_bounds_ms",
    "from_ms",
    "now_ms",
    "resolve_now",
    "start_of_day",
    "sunday_weekday",
    "to_ms",
]
