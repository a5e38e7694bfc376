# src/ascend/core/filters.py
"""
View filters over goal records and forests.

Two independent filters feed the display list:

- ``filter_today`` runs on flat records *before* tree construction and keeps
  the goals due on the current local day. Linkage is rebuilt among the
  survivors only, so an eligible child of an ineligible parent becomes a
  root of the "today" forest.
- ``search_forest`` runs on a built forest and prunes subtrees without a
  case-insensitive title match, keeping (and expanding) every ancestor of a
  match.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from ..models import Goal
from ..utils.clock import day_bounds_ms, resolve_now, sunday_weekday
from .tree import Forest

logger = logging.getLogger(__name__)


def is_due_today(goal: Goal, now: Optional[datetime] = None) -> bool:
    """
    Check whether a goal belongs in the "today" view.

    A goal is due iff it is not completed and at least one holds:
    its recurring schedule contains today's weekday; its one-shot due time
    falls within today; or it declares neither a schedule nor a due time.
    An empty schedule counts as no schedule, so clearing the last
    scheduled day makes a goal due every day again rather than dropping
    it from the view.

    Args:
        goal: The record to test.
        now: Reference time; naive values are local time. Defaults to now.

    Returns:
        True if the goal is eligible today.
    """
    if goal.is_completed:
        return False

    now = resolve_now(now)

    if goal.scheduled_days and sunday_weekday(now) in goal.scheduled_days:
        return True

    if goal.due_at is not None:
        day_start, next_day_start = day_bounds_ms(now)
        if day_start <= goal.due_at < next_day_start:
            return True

    return not goal.scheduled_days and goal.due_at is None


def filter_today(goals: Iterable[Goal], now: Optional[datetime] = None) -> List[Goal]:
    """Keep the goals due today, preserving storage order."""
    now = resolve_now(now)
    return [goal for goal in goals if is_due_today(goal, now)]


def search_forest(forest: Forest, query: str) -> Forest:
    """
    Prune a forest to the paths leading to title matches.

    A node is kept iff its title contains ``query`` (case-insensitive) or at
    least one descendant is kept. Kept nodes get their children replaced by
    the kept children and are forced expanded. The input forest is left
    untouched; goal records are shared with the result.

    The query is matched as given, surrounding whitespace included; it is
    only stripped to decide whether it is blank.

    Args:
        forest: Forest to filter.
        query: Search text. Blank queries return ``forest`` itself.

    Returns:
        The filtered forest.
    """
    if not query.strip():
        return forest
    needle = query.lower()

    result = Forest(broken_links=list(forest.broken_links))

    # Post-order: a node is decided once all of its children are.
    for root_id in forest.roots:
        stack = [(root_id, False)]
        while stack:
            node_id, children_done = stack.pop()
            node = forest.nodes[node_id]
            if not children_done:
                stack.append((node_id, True))
                stack.extend((child_id, False) for child_id in reversed(node.children))
                continue
            kept_children = [child_id for child_id in node.children if child_id in result.nodes]
            if needle in node.title.lower() or kept_children:
                result.nodes[node_id] = replace(node, children=kept_children, expanded=True)

    result.roots = [root_id for root_id in forest.roots if root_id in result.nodes]

    logger.debug("Search %r kept %d of %d nodes", query, len(result.nodes), len(forest.nodes))
    return result
