# src/ascend/core/cascade.py
"""
Cascading mutations over a subtree or a sibling group.

- **delete** removes a goal and every transitive descendant, one
  independent delete request per record.
- **toggle_complete** flips a goal's completion flag and forces the same
  completion flag, progress (100 or 0) and completion time onto every
  descendant. Descendants' previous manual progress is overwritten.
- **move** swaps a goal with its previous or next sibling and persists the
  whole reordered list with a single bulk replace.

Requests of one cascade are issued concurrently and independently; there is
no transaction. Every request is attempted, and when some fail a
:class:`~ascend.exceptions.CascadeError` names the failed and the applied
ids so the caller can retry or reload.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Dict, List, Literal, Optional, Sequence, Tuple

from ..exceptions import CascadeError
from ..models import Goal
from ..storage.base import GoalRecordStore
from ..utils.clock import now_ms

logger = logging.getLogger(__name__)

MoveDirection = Literal["up", "down"]


def collect_subtree_ids(goals: Sequence[Goal], target_id: str) -> List[str]:
    """
    Collect ``target_id`` and all its transitive descendants, pre-order.

    Traversal follows parent pointers and tolerates cycles.

    Returns:
        Ids with the target first, or an empty list when the target is unknown.
    """
    if not any(g.id == target_id for g in goals):
        return []

    children: Dict[str, List[str]] = defaultdict(list)
    for goal in goals:
        if goal.parent_id is not None:
            children[goal.parent_id].append(goal.id)

    collected: List[str] = []
    seen = set()
    stack = [target_id]
    while stack:
        goal_id = stack.pop()
        if goal_id in seen:
            continue
        seen.add(goal_id)
        collected.append(goal_id)
        stack.extend(reversed(children.get(goal_id, [])))
    return collected


def swap_with_sibling(goals: Sequence[Goal], target_id: str, direction: MoveDirection) -> Optional[List[Goal]]:
    """
    Compute the record list after moving a goal among its siblings.

    Siblings are the records sharing the target's parent, in storage order.
    The adjacent sibling need not be adjacent in the full list; the two
    records simply trade positions in it.

    Returns:
        The new full list, or None when the move is impossible.
    """
    if direction not in ("up", "down"):
        raise ValueError(f"Invalid move direction: {direction!r}")

    target = next((g for g in goals if g.id == target_id), None)
    if target is None:
        return None

    siblings = [g for g in goals if g.parent_id == target.parent_id]
    current = next(i for i, g in enumerate(siblings) if g.id == target_id)
    swap = current - 1 if direction == "up" else current + 1
    if swap < 0 or swap >= len(siblings):
        return None

    index_a = next(i for i, g in enumerate(goals) if g.id == target_id)
    index_b = next(i for i, g in enumerate(goals) if g.id == siblings[swap].id)

    reordered = list(goals)
    reordered[index_a], reordered[index_b] = goals[index_b], goals[index_a]
    return reordered


class CascadeMutator:
    """
    Applies cascading mutations through a record store.

    Args:
        store: The goal-record store receiving the writes.
    """

    def __init__(self, store: GoalRecordStore) -> None:
        self.store = store

    async def delete(self, goals: Sequence[Goal], target_id: str) -> List[str]:
        """
        Delete a goal and its whole subtree.

        Returns:
            The deleted ids (target first); empty for an unknown target.

        Raises:
            CascadeError: If some deletes failed.
        """
        ids = collect_subtree_ids(goals, target_id)
        if not ids:
            logger.debug("Delete of unknown goal %s ignored", target_id)
            return []

        await self._dispatch("delete", [(goal_id, self.store.delete_goal(goal_id)) for goal_id in ids])
        logger.info("Deleted goal %s and %d descendants", target_id, len(ids) - 1)
        return ids

    async def toggle_complete(
        self,
        goals: Sequence[Goal],
        target_id: str,
        now: Optional[int] = None,
    ) -> List[Goal]:
        """
        Flip completion on a goal and force the result onto its subtree.

        Args:
            goals: Current records in storage order.
            target_id: Goal to toggle.
            now: Completion time in epoch milliseconds (defaults to now).

        Returns:
            The updated records in storage order; empty for an unknown target.

        Raises:
            CascadeError: If some replaces failed.
        """
        target = next((g for g in goals if g.id == target_id), None)
        if target is None:
            return []

        completed = not target.is_completed
        timestamp = (now if now is not None else now_ms()) if completed else None
        ids = set(collect_subtree_ids(goals, target_id))

        updated = [
            g.model_copy(
                update={
                    "is_completed": completed,
                    "progress": 100 if completed else 0,
                    "completed_at": timestamp,
                }
            )
            for g in goals
            if g.id in ids
        ]

        await self._dispatch("toggle_complete", [(g.id, self.store.replace_goal(g)) for g in updated])
        logger.info(
            "Marked goal %s and %d descendants as %s",
            target_id,
            len(updated) - 1,
            "completed" if completed else "not completed",
        )
        return updated

    async def move(self, goals: Sequence[Goal], target_id: str, direction: MoveDirection) -> Optional[List[Goal]]:
        """
        Swap a goal with its adjacent sibling and persist the full list.

        Returns:
            The persisted list, or None when nothing moved.
        """
        reordered = swap_with_sibling(goals, target_id, direction)
        if reordered is None:
            return None
        await self.store.replace_all(reordered)
        logger.debug("Moved goal %s %s", target_id, direction)
        return reordered

    async def _dispatch(self, operation: str, requests: List[Tuple[str, Awaitable[object]]]) -> None:
        results = await asyncio.gather(*(request for _, request in requests), return_exceptions=True)

        failed: List[str] = []
        succeeded: List[str] = []
        for (goal_id, _), result in zip(requests, results):
            if isinstance(result, Exception):
                logger.error("Cascade %s failed for goal %s: %s", operation, goal_id, result)
                failed.append(goal_id)
            elif isinstance(result, BaseException):
                raise result
            else:
                succeeded.append(goal_id)

        if failed:
            raise CascadeError(operation, failed_ids=failed, succeeded_ids=succeeded)
