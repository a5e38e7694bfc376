# src/ascend/storage/report.py
"""
Progress-by-period report over completed goals.

Buckets use local calendar days:

- ``weekly``: the 7 days ending today, oldest first, keyed by day of month;
- ``monthly``: the 30 days ending today, oldest first, keyed by day of month;
- ``yearly``: the 12 months of the current year, keyed by month number.

Each bucket counts goals that are completed and carry a completion time
inside the bucket, and lists their ids.
"""

from datetime import date, datetime, timedelta
from datetime import time as dt_time
from typing import Iterable, List, Optional

from ..models import Goal, ProgressBucket, ProgressReport
from ..utils.clock import resolve_now, to_ms

WEEKLY_DAYS = 7
MONTHLY_DAYS = 30


def _midnight_ms(day: date, reference: datetime) -> int:
    return to_ms(datetime.combine(day, dt_time.min, tzinfo=reference.tzinfo))


def _completed_between(goals: List[Goal], start_ms: int, end_ms: int) -> List[Goal]:
    return [g for g in goals if start_ms <= g.completed_at < end_ms]


def _daily_buckets(goals: List[Goal], today: date, days: int, reference: datetime) -> List[ProgressBucket]:
    buckets = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        start = _midnight_ms(day, reference)
        end = _midnight_ms(day + timedelta(days=1), reference)
        completed = _completed_between(goals, start, end)
        buckets.append(ProgressBucket(day=day.day, progress=len(completed), goal_ids=[g.id for g in completed]))
    return buckets


def _monthly_buckets(goals: List[Goal], year: int, reference: datetime) -> List[ProgressBucket]:
    buckets = []
    for month in range(1, 13):
        start = _midnight_ms(date(year, month, 1), reference)
        next_month = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        end = _midnight_ms(next_month, reference)
        completed = _completed_between(goals, start, end)
        buckets.append(ProgressBucket(month=month, progress=len(completed), goal_ids=[g.id for g in completed]))
    return buckets


def build_progress_report(goals: Iterable[Goal], now: Optional[datetime] = None) -> ProgressReport:
    """
    Bucket completed goals into weekly, monthly and yearly series.

    Args:
        goals: All goal records.
        now: Reference time (naive = local). Defaults to now.

    Returns:
        The report; goals without a completion time are ignored.
    """
    now = resolve_now(now)
    today = now.date()
    completed = [g for g in goals if g.is_completed and g.completed_at is not None]

    return ProgressReport(
        weekly=_daily_buckets(completed, today, WEEKLY_DAYS, now),
        monthly=_daily_buckets(completed, today, MONTHLY_DAYS, now),
        yearly=_monthly_buckets(completed, today.year, now),
    )
