# src/ascend/core/__init__.py
"""
Goal derivation engine.

Pure, synchronous derivations (forest construction, view filters,
flattening, statistics) plus the stateful pieces built on them: progress
history sampling, reminder scanning and cascading mutations.

Example:
    from ascend.core import build_forest, filter_today, search_forest, flatten_forest

    forest = build_forest(filter_today(goals))
    rows = flatten_forest(search_forest(forest, "report"))
"""

from .cascade import CascadeMutator, collect_subtree_ids, swap_with_sibling
from .filters import filter_today, is_due_today, search_forest
from .flatten import FlatGoal, flatten_forest, visible_ids
from .history import (
    HistoryStore,
    HistoryTracker,
    InMemoryHistoryStore,
    JsonHistoryStore,
)
from .reminders import ReminderScanner, due_reminders
from .stats import ProgressStats, compute_stats
from .tree import Forest, GoalNode, build_forest

__all__ = [
    # Tree
    "Forest",
    "GoalNode",
    "build_forest",
    # Filters
    "filter_today",
    "is_due_today",
    "search_forest",
    # Flattening
    "FlatGoal",
    "flatten_forest",
    "visible_ids",
    # Stats & history
    "ProgressStats",
    "compute_stats",
    "HistoryStore",
    "HistoryTracker",
    "InMemoryHistoryStore",
    "JsonHistoryStore",
    # Reminders
    "ReminderScanner",
    "due_reminders",
    # Cascades
    "CascadeMutator",
    "collect_subtree_ids",
    "swap_with_sibling",
]
