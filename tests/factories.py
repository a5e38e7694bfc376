# tests/factories.py
"""Test data builders shared across the suite."""

from datetime import datetime

from ascend.models import Goal
from ascend.utils.clock import to_ms

# Wednesday 2025-03-12 14:30 local time; weekday 3 with Sunday = 0.
REFERENCE_NOW = datetime(2025, 3, 12, 14, 30)
REFERENCE_NOW_MS = to_ms(REFERENCE_NOW)
WEDNESDAY = 3


def make_goal(goal_id: str, title: str = None, parent_id: str = None, **fields) -> Goal:
    """Build a goal with a stable creation time; extra fields use Python names."""
    return Goal(
        id=goal_id,
        title=title if title is not None else f"Goal {goal_id}",
        parent_id=parent_id,
        created_at=fields.pop("created_at", REFERENCE_NOW_MS - 86_400_000),
        **fields,
    )
