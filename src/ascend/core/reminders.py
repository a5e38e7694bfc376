# src/ascend/core/reminders.py
"""
Reminder Scanning.

A periodic sweep over all goal records. A reminder with timestamp ``t``
fires on a sweep at time ``now`` iff ``now - window < t <= now``. Each
firing is acknowledged by writing the record back with its reminder
cleared, so the next sweep does not see it again.

The trailing window must be strictly longer than the sweep interval:
otherwise a late sweep can step over a reminder entirely. The scanner
refuses to be built with a window that is not.

Only the decision to fire lives here. Delivery (desktop notification,
push, log line) is whatever ``on_fire`` callbacks do with the goal.

Example:
    scanner = ReminderScanner(store)
    scanner.on_fire(notify_user)
    scheduler.register(scanner.as_job())
"""

import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from ..exceptions import ConfigError, RecordWriteError
from ..logging_config import log_display
from ..models import Goal
from ..scheduler import ScheduledJob
from ..storage.base import GoalRecordStore
from ..utils.clock import now_ms

logger = logging.getLogger(__name__)

DEFAULT_SCAN_INTERVAL = timedelta(seconds=10)
DEFAULT_WINDOW = timedelta(seconds=60)


def due_reminders(goals: Iterable[Goal], now: int, window_ms: int) -> List[Goal]:
    """
    Select the goals whose reminder falls inside ``(now - window_ms, now]``.

    Args:
        goals: Records to scan.
        now: Reference time in epoch milliseconds.
        window_ms: Trailing window length in milliseconds.
    """
    return [g for g in goals if g.reminder is not None and now - window_ms < g.reminder <= now]


class ReminderScanner:
    """
    Detects due reminders and acknowledges each one once.

    Besides clearing the reminder in the store, the scanner remembers which
    (goal, reminder time) pairs it already fired while they are inside the
    window, so a failed or slow acknowledgment never causes a second firing.

    Args:
        store: Record store used to load goals and write acknowledgments.
        interval: Sweep interval.
        window: Trailing window; must be longer than ``interval``.

    Raises:
        ConfigError: If ``window`` is not longer than ``interval``.
    """

    def __init__(
        self,
        store: GoalRecordStore,
        interval: timedelta = DEFAULT_SCAN_INTERVAL,
        window: timedelta = DEFAULT_WINDOW,
    ) -> None:
        if window <= interval:
            raise ConfigError(
                f"Reminder window ({window.total_seconds()}s) must be longer than "
                f"the scan interval ({interval.total_seconds()}s)."
            )
        self.store = store
        self.interval = interval
        self.window = window
        self._fired: Dict[str, int] = {}
        self._on_fire: List[Callable[[Goal], Awaitable[None]]] = []

    @classmethod
    def from_config(cls, config: Any, store: GoalRecordStore) -> "ReminderScanner":
        """Create a scanner from a RemindersConfig."""
        return cls(
            store=store,
            interval=timedelta(seconds=config.scan_interval_seconds),
            window=timedelta(seconds=config.window_seconds),
        )

    @property
    def window_ms(self) -> int:
        return int(self.window.total_seconds() * 1000)

    def on_fire(self, callback: Callable[[Goal], Awaitable[None]]) -> None:
        """
        Register a callback invoked with each goal whose reminder fires.

        Args:
            callback: Async function(goal)
        """
        self._on_fire.append(callback)

    async def scan(self, goals: Optional[List[Goal]] = None, now: Optional[int] = None) -> List[Goal]:
        """
        Run one sweep.

        Args:
            goals: Record snapshot to scan; loaded from the store when omitted.
            now: Reference time in epoch milliseconds (defaults to now).

        Returns:
            The goals that fired on this sweep, as they were before acknowledgment.
        """
        now = now if now is not None else now_ms()
        if goals is None:
            goals = await self.store.list_goals()

        self._forget_expired(now)

        fired = [g for g in due_reminders(goals, now, self.window_ms) if self._fired.get(g.id) != g.reminder]
        for goal in fired:
            self._fired[goal.id] = goal.reminder
            log_display(logger, logging.INFO, "Reminder due: %s (goal %s)", goal.title, goal.id)
            await self._notify(goal)
            await self._acknowledge(goal)

        return fired

    def as_job(self) -> ScheduledJob:
        """Wrap the sweep as a scheduler job running every ``interval``."""

        async def sweep() -> None:
            await self.scan()

        return ScheduledJob(
            name="reminder_scan",
            callback=sweep,
            interval=self.interval,
            description="Fire due goal reminders",
        )

    def _forget_expired(self, now: int) -> None:
        cutoff = now - self.window_ms
        self._fired = {goal_id: ts for goal_id, ts in self._fired.items() if ts > cutoff}

    async def _notify(self, goal: Goal) -> None:
        for callback in self._on_fire:
            try:
                await callback(goal)
            except Exception as e:
                logger.error("Reminder callback failed for goal %s: %s", goal.id, e)

    async def _acknowledge(self, goal: Goal) -> None:
        try:
            await self.store.replace_goal(goal.model_copy(update={"reminder": None}))
        except RecordWriteError as e:
            logger.warning("Could not clear reminder on goal %s: %s", goal.id, e)
