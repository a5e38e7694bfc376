# src/ascend/tracker.py
"""
Goal tracker facade.

:class:`GoalTracker` is the client-side controller: it holds the latest
record snapshot from a :class:`~ascend.storage.base.GoalRecordStore`,
derives views from it with the pure engine in :mod:`ascend.core`, and
routes every user action to the store, reloading afterwards so the next
view reflects what the store actually holds.

Background work (the reminder sweep and progress history sampling) runs on
a :class:`~ascend.scheduler.HeartbeatScheduler` built by
:meth:`GoalTracker.build_scheduler`.

Example:
    tracker = await GoalTracker.from_config(load_config())
    await tracker.refresh()
    view = tracker.view(mode="today", query="report")
    for row in view.flat:
        print("  " * row.depth, row.title, row.node.computed_progress)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, List, Literal, Optional

from .core import (
    CascadeMutator,
    FlatGoal,
    Forest,
    HistoryTracker,
    InMemoryHistoryStore,
    ProgressStats,
    ReminderScanner,
    build_forest,
    compute_stats,
    filter_today,
    flatten_forest,
    search_forest,
    visible_ids,
)
from .core.cascade import MoveDirection
from .exceptions import GoalNotFoundError
from .models import Goal, ProgressReport
from .scheduler import HeartbeatScheduler, ScheduledJob
from .storage import GoalRecordStore, create_store
from .suggestions import NullSuggestionService, SuggestionService
from .utils.clock import now_ms

logger = logging.getLogger(__name__)

ViewMode = Literal["today", "all"]
NavDirection = Literal["up", "down", "escape"]

POMODORO_INCREMENT = 25
POMODORO_PROGRESS_CAP = 99


@dataclass
class GoalView:
    """
    One rendered view of the goal records.

    Attributes:
        mode: "today" or "all".
        query: Search text applied to ``forest`` (may be empty).
        forest: Mode-filtered forest, before search.
        visible_forest: ``forest`` after search.
        flat: Depth-annotated pre-order rows of ``visible_forest``.
        stats: Statistics of ``forest``.
    """

    mode: ViewMode
    query: str
    forest: Forest
    visible_forest: Forest
    flat: List[FlatGoal] = field(default_factory=list)
    stats: ProgressStats = field(default_factory=ProgressStats)

    @property
    def visible_ids(self) -> List[str]:
        return visible_ids(self.flat)


class GoalTracker:
    """
    Controller tying the record store, the derivation engine and the
    background jobs together.

    Mutations are serialized with an asyncio lock; each one reads the
    current snapshot, writes through the store and reloads.

    Args:
        store: Goal-record store.
        history: Progress history tracker (default: in-memory slot).
        reminders: Reminder scanner (default: 10s sweep over a 60s window).
        suggestions: Sub-goal suggestion service (default: disabled).
        tick_interval: Scheduler tick used by :meth:`build_scheduler`.
        history_sample_interval: How often the scheduler samples progress.
    """

    def __init__(
        self,
        store: GoalRecordStore,
        history: Optional[HistoryTracker] = None,
        reminders: Optional[ReminderScanner] = None,
        suggestions: Optional[SuggestionService] = None,
        tick_interval: timedelta = timedelta(seconds=1),
        history_sample_interval: Optional[timedelta] = timedelta(seconds=60),
        reminders_enabled: bool = True,
    ) -> None:
        self.store = store
        self.history = history if history is not None else HistoryTracker(InMemoryHistoryStore())
        self.reminders = reminders if reminders is not None else ReminderScanner(store)
        self.suggestions: SuggestionService = suggestions if suggestions is not None else NullSuggestionService()
        self.mutator = CascadeMutator(store)
        self.tick_interval = tick_interval
        self.history_sample_interval = history_sample_interval
        self.reminders_enabled = reminders_enabled

        self._goals: List[Goal] = []
        self._lock = asyncio.Lock()

    @classmethod
    async def from_config(
        cls,
        config: Any,
        store: Optional[GoalRecordStore] = None,
        suggestions: Optional[SuggestionService] = None,
    ) -> "GoalTracker":
        """
        Build a tracker from a TrackerConfig and load the durable history.

        Args:
            config: A TrackerConfig instance.
            store: Optional store override (default: from ``config.store``).
            suggestions: Optional suggestion service override.
        """
        from .suggestions import GeminiSuggestionService

        store = store if store is not None else create_store(config.store)
        history_store = None if config.history.enabled else InMemoryHistoryStore()
        history = HistoryTracker.from_config(config.history, store=history_store)
        await history.load()

        tracker = cls(
            store=store,
            history=history,
            reminders=ReminderScanner.from_config(config.reminders, store),
            suggestions=suggestions if suggestions is not None else GeminiSuggestionService.from_config(config.suggestions),
            tick_interval=timedelta(seconds=config.scheduler.tick_seconds),
            history_sample_interval=(
                timedelta(seconds=config.history.sample_interval_seconds) if config.history.enabled else None
            ),
            reminders_enabled=config.reminders.enabled,
        )
        return tracker

    # ----- reading ------------------------------------------------------------

    @property
    def goals(self) -> List[Goal]:
        """The current record snapshot, in storage order."""
        return list(self._goals)

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        return next((g for g in self._goals if g.id == goal_id), None)

    async def refresh(self) -> List[Goal]:
        """Reload records from the store (an unreachable store reads as empty)."""
        self._goals = await self.store.list_goals()
        logger.debug("Loaded %d goal records", len(self._goals))
        return self.goals

    def view(self, mode: ViewMode = "all", query: str = "", now: Optional[datetime] = None) -> GoalView:
        """
        Derive the view for ``mode`` and ``query`` from the current snapshot.

        Args:
            mode: "today" keeps records due today, "all" keeps every record.
            query: Case-insensitive title search applied after the mode filter.
            now: Reference local time for "today" (defaults to now).
        """
        if mode not in ("today", "all"):
            raise ValueError(f"Invalid view mode '{mode}'. Must be 'today' or 'all'")
        records = filter_today(self._goals, now) if mode == "today" else self._goals
        forest = build_forest(records)
        visible = search_forest(forest, query)
        return GoalView(
            mode=mode,
            query=query,
            forest=forest,
            visible_forest=visible,
            flat=flatten_forest(visible),
            stats=compute_stats(forest),
        )

    async def progress_report(self, now: Optional[datetime] = None) -> ProgressReport:
        return await self.store.progress_report(now)

    async def motivation(self, goal_id: str) -> str:
        """One encouraging sentence for a goal, from the suggestion service."""
        goal = self._require(goal_id)
        node = build_forest(self._goals).get(goal_id)
        progress = round(node.computed_progress) if node else goal.progress
        return await self.suggestions.generate_motivation(goal.title, progress)

    @staticmethod
    def navigate(ids: List[str], selected_id: Optional[str], direction: NavDirection) -> Optional[str]:
        """
        Keyboard selection over the visible rows, wrapping at both ends.

        Args:
            ids: Visible ids in display order.
            selected_id: Current selection, or None.
            direction: "down", "up" or "escape" (clears the selection).

        Returns:
            The new selection, or None.
        """
        if direction == "escape" or not ids:
            return None
        idx = ids.index(selected_id) if selected_id in ids else -1
        if direction == "down":
            return ids[idx + 1] if idx < len(ids) - 1 else ids[0]
        if direction == "up":
            return ids[idx - 1] if idx > 0 else ids[-1]
        raise ValueError(f"Invalid navigation direction '{direction}'")

    # ----- mutations ----------------------------------------------------------

    async def add_goal(
        self,
        title: str,
        parent_id: Optional[str] = None,
        description: Optional[str] = None,
        with_suggestions: bool = False,
    ) -> List[Goal]:
        """
        Create a goal, optionally followed by AI-suggested sub-goals.

        Returns:
            The new goal followed by any sub-goals created for it.

        Raises:
            GoalNotFoundError: If ``parent_id`` is not a known goal.
            RecordWriteError: If the new goal cannot be stored.
        """
        async with self._lock:
            parent = self._require(parent_id) if parent_id is not None else None
            goal = await self.store.create_goal(Goal.create(title, parent_id=parent_id, description=description))
            created = [goal]
            logger.info("Created goal %s: %s", goal.id, goal.title)

            if with_suggestions:
                context = f"This is a subgoal of: {parent.title}" if parent is not None else None
                for suggestion in await self.suggestions.suggest_subgoals(title, context):
                    child = Goal.create(suggestion.title, parent_id=goal.id, description=suggestion.description)
                    created.append(await self.store.create_goal(child))
                if len(created) > 1:
                    logger.info("Added %d suggested sub-goals under %s", len(created) - 1, goal.id)

            await self.refresh()
            return created

    async def update_progress(self, goal_id: str, progress: int, now: Optional[int] = None) -> Goal:
        """Set manual progress; the goal is completed exactly when progress is 100."""
        async with self._lock:
            goal = self._require(goal_id)
            progress = Goal.model_validate({**goal.model_dump(), "progress": progress}).progress
            completed = progress == 100
            if completed and not goal.is_completed:
                completed_at = now if now is not None else now_ms()
            elif completed:
                completed_at = goal.completed_at
            else:
                completed_at = None
            return await self._replace(
                goal, progress=progress, is_completed=completed, completed_at=completed_at
            )

    async def toggle_complete(self, goal_id: str, now: Optional[int] = None) -> List[Goal]:
        """Flip completion on a goal and its whole subtree."""
        async with self._lock:
            self._require(goal_id)
            try:
                return await self.mutator.toggle_complete(self._goals, goal_id, now=now)
            finally:
                await self.refresh()

    async def delete(self, goal_id: str) -> List[str]:
        """Delete a goal and its whole subtree; unknown ids are ignored."""
        async with self._lock:
            try:
                return await self.mutator.delete(self._goals, goal_id)
            finally:
                await self.refresh()

    async def move(self, goal_id: str, direction: MoveDirection) -> bool:
        """Swap a goal with its adjacent sibling. Returns False when nothing moved."""
        async with self._lock:
            reordered = await self.mutator.move(self._goals, goal_id, direction)
            if reordered is None:
                return False
            await self.refresh()
            return True

    async def toggle_expanded(self, goal_id: str) -> Goal:
        async with self._lock:
            goal = self._require(goal_id)
            return await self._replace(goal, expanded=not goal.expanded)

    async def toggle_scheduled_day(self, goal_id: str, day: int) -> Goal:
        """Add ``day`` (0 = Sunday) to the recurring schedule, or remove it if present."""
        if not 0 <= day <= 6:
            raise ValueError(f"Invalid weekday {day}. Must be between 0 (Sunday) and 6 (Saturday)")
        async with self._lock:
            goal = self._require(goal_id)
            days = list(goal.scheduled_days or [])
            if day in days:
                days.remove(day)
            else:
                days.append(day)
            return await self._replace(goal, scheduled_days=days)

    async def set_due_date(self, goal_id: str, due_at: Optional[int]) -> Goal:
        """Set (or clear with None) the one-shot due time, epoch milliseconds."""
        async with self._lock:
            return await self._replace(self._require(goal_id), due_at=due_at)

    async def set_reminder(self, goal_id: str, timestamp: Optional[int]) -> Goal:
        """Set (or clear with None) the reminder time, epoch milliseconds."""
        async with self._lock:
            return await self._replace(self._require(goal_id), reminder=timestamp)

    async def update_details(
        self, goal_id: str, title: Optional[str] = None, description: Optional[str] = None
    ) -> Goal:
        """Edit title and/or description; None leaves a field unchanged."""
        async with self._lock:
            goal = self._require(goal_id)
            update = {}
            if title is not None:
                update["title"] = title
            if description is not None:
                update["description"] = description
            return await self._replace(goal, **update)

    async def record_pomodoro(self, goal_id: str, completed: bool) -> None:
        """
        Apply the outcome of a focus session.

        A session marked complete toggles completion of the goal (and its
        subtree); otherwise progress advances by 25 points, capped at 99 so
        completion stays a deliberate step.
        """
        if completed:
            await self.toggle_complete(goal_id)
            return
        goal = self._require(goal_id)
        await self.update_progress(goal_id, min(goal.progress + POMODORO_INCREMENT, POMODORO_PROGRESS_CAP))

    # ----- background work ----------------------------------------------------

    async def sample_history(self, now: Optional[int] = None) -> bool:
        """Offer the statistics of the full forest to the history tracker."""
        stats = compute_stats(build_forest(self._goals))
        return await self.history.record(stats, timestamp=now)

    async def scan_reminders(self, now: Optional[int] = None) -> List[Goal]:
        """Run one reminder sweep against fresh records; reload if any fired."""
        fired = await self.reminders.scan(now=now)
        if fired:
            await self.refresh()
        return fired

    def build_scheduler(self) -> HeartbeatScheduler:
        """Create a scheduler with the reminder sweep and history sampling jobs."""
        scheduler = HeartbeatScheduler(tick_interval=self.tick_interval)

        if self.reminders_enabled:

            async def reminder_sweep() -> None:
                await self.scan_reminders()

            scheduler.register(
                ScheduledJob(
                    name="reminder_scan",
                    callback=reminder_sweep,
                    interval=self.reminders.interval,
                    description="Fire due goal reminders",
                )
            )

        if self.history_sample_interval is not None:

            async def history_sample() -> None:
                await self.refresh()
                await self.sample_history()

            scheduler.register(
                ScheduledJob(
                    name="history_sample",
                    callback=history_sample,
                    interval=self.history_sample_interval,
                    description="Sample overall progress into the history series",
                )
            )

        return scheduler

    # ----- helpers ------------------------------------------------------------

    def _require(self, goal_id: str) -> Goal:
        goal = self.get_goal(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)
        return goal

    async def _replace(self, goal: Goal, **update: Any) -> Goal:
        updated = Goal.model_validate({**goal.model_dump(), **update})
        try:
            return await self.store.replace_goal(updated)
        finally:
            await self.refresh()
