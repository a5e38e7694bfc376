# src/ascend/api_server/seed.py
"""Demo records loaded into an empty development server."""

from datetime import datetime, timedelta
from typing import List, Optional

from ..models import Goal
from ..utils.clock import sunday_weekday, to_ms


def demo_goals(now: Optional[datetime] = None) -> List[Goal]:
    """
    A small sample tree: finished work from the last few days, an
    in-progress goal with one completed sub-goal, and recurring tasks.
    """
    now = now or datetime.now()
    today = sunday_weekday(now)
    yesterday = 6 if today == 0 else today - 1

    def days_ago(n: int) -> int:
        return to_ms(now - timedelta(days=n))

    return [
        Goal(id="1", title="Finish Q4 Report", is_completed=True, progress=100,
             created_at=days_ago(5), completed_at=days_ago(2), scheduled_days=[yesterday]),
        Goal(id="2", title="Plan Team Offsite", is_completed=True, progress=100,
             created_at=days_ago(10), completed_at=days_ago(1), scheduled_days=[today]),
        Goal(id="3", title="Develop New Feature", progress=50,
             created_at=days_ago(2), scheduled_days=[today]),
        Goal(id="4", title="Gather requirements", is_completed=True, progress=100, parent_id="3",
             created_at=days_ago(2), completed_at=days_ago(0), scheduled_days=[today]),
        Goal(id="5", title="Daily Standup", created_at=days_ago(1), scheduled_days=[]),
        Goal(id="6", title="Review Code", created_at=days_ago(3), scheduled_days=[1, 3, 5]),
        Goal(id="7", title="Weekly Sync with Manager", created_at=days_ago(7), scheduled_days=[today]),
    ]
