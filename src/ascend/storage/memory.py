# src/ascend/storage/memory.py
"""In-memory goal-record store, used by the bundled server and by tests."""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from ..exceptions import GoalNotFoundError, RecordWriteError
from ..models import Goal, ProgressReport
from .report import build_progress_report

logger = logging.getLogger(__name__)


class InMemoryGoalStore:
    """
    Keeps the ordered record list in process memory.

    Args:
        goals: Optional initial records, in storage order.
    """

    def __init__(self, goals: Optional[Iterable[Goal]] = None) -> None:
        self._goals: List[Goal] = list(goals or [])

    async def list_goals(self) -> List[Goal]:
        return list(self._goals)

    async def create_goal(self, goal: Goal) -> Goal:
        if any(existing.id == goal.id for existing in self._goals):
            raise RecordWriteError(f"Goal '{goal.id}' already exists.", goal_ids=[goal.id], retryable=False)
        self._goals.append(goal)
        logger.debug("Created goal %s", goal.id)
        return goal

    async def replace_goal(self, goal: Goal) -> Goal:
        for i, existing in enumerate(self._goals):
            if existing.id == goal.id:
                self._goals[i] = goal
                return goal
        raise GoalNotFoundError(goal.id)

    async def replace_all(self, goals: List[Goal]) -> List[Goal]:
        self._goals = list(goals)
        logger.debug("Replaced all goals (%d records)", len(self._goals))
        return list(self._goals)

    async def delete_goal(self, goal_id: str) -> None:
        before = len(self._goals)
        self._goals = [g for g in self._goals if g.id != goal_id]
        if len(self._goals) == before:
            logger.debug("Delete of unknown goal %s ignored", goal_id)

    async def progress_report(self, now: Optional[datetime] = None) -> ProgressReport:
        return build_progress_report(self._goals, now)
