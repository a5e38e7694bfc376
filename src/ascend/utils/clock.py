# src/ascend/utils/clock.py
"""
Time helpers shared by the derivation engine.

Goal records carry epoch-millisecond timestamps and Sunday-based weekday
numbers (0 = Sunday ... 6 = Saturday). Naive datetimes are local time.
"""

import time
from datetime import datetime, timedelta, tzinfo
from datetime import time as dt_time
from typing import Optional

MS_PER_SECOND = 1000
MS_PER_DAY = 24 * 60 * 60 * MS_PER_SECOND


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * MS_PER_SECOND)


def to_ms(moment: datetime) -> int:
    """Convert a datetime (naive = local) to epoch milliseconds."""
    return int(moment.timestamp() * MS_PER_SECOND)


def from_ms(timestamp_ms: int, tz: Optional[tzinfo] = None) -> datetime:
    """Convert epoch milliseconds to a datetime (local naive when tz is None)."""
    return datetime.fromtimestamp(timestamp_ms / MS_PER_SECOND, tz)


def sunday_weekday(moment: datetime) -> int:
    """Weekday of ``moment`` with Sunday as 0."""
    return (moment.weekday() + 1) % 7


def start_of_day(moment: datetime) -> datetime:
    """Midnight at the start of ``moment``'s calendar day, same tzinfo."""
    return datetime.combine(moment.date(), dt_time.min, tzinfo=moment.tzinfo)


def day_bounds_ms(moment: datetime) -> tuple[int, int]:
    """Half-open ``[start of day, start of next day)`` in epoch milliseconds."""
    start = start_of_day(moment)
    end = datetime.combine(start.date() + timedelta(days=1), dt_time.min, tzinfo=moment.tzinfo)
    return to_ms(start), to_ms(end)


def resolve_now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()
