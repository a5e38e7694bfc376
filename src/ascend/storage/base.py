# src/ascend/storage/base.py
"""
Abstract interface for goal-record stores.

The derivation engine never talks to a particular storage technology; it is
handed an object satisfying :class:`GoalRecordStore`. Record order is
significant: it is the sibling order shown in the tree, and ``replace_all``
is how a reorder is persisted.

Error contract:
    - ``list_goals`` and ``progress_report`` never raise for transport
      problems; they log and return an empty result.
    - Every write raises :class:`~ascend.exceptions.RecordWriteError` (or a
      subclass) when it cannot be applied.
"""

from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable

from ..models import Goal, ProgressReport


@runtime_checkable
class GoalRecordStore(Protocol):
    """Protocol for goal-record storage backends."""

    async def list_goals(self) -> List[Goal]:
        """Return every record in storage order."""
        ...

    async def create_goal(self, goal: Goal) -> Goal:
        """Append a new record."""
        ...

    async def replace_goal(self, goal: Goal) -> Goal:
        """Replace the record with the same id, keeping its position."""
        ...

    async def replace_all(self, goals: List[Goal]) -> List[Goal]:
        """Replace the entire ordered record list."""
        ...

    async def delete_goal(self, goal_id: str) -> None:
        """Delete one record; unknown ids are ignored."""
        ...

    async def progress_report(self, now: Optional[datetime] = None) -> ProgressReport:
        """Completed-goal counts bucketed by day and month."""
        ...
