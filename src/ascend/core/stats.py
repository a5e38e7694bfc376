# src/ascend/core/stats.py
"""
Aggregate statistics over a forest.

``total`` and ``completed`` count every node, internal and leaf alike, while
``overall_progress`` averages the root nodes only. The two are deliberately
not the same population.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ..models import ProgressSnapshot
from .tree import Forest


@dataclass(frozen=True)
class ProgressStats:
    """Totals for one forest."""

    total: int = 0
    completed: int = 0
    overall_progress: float = 0.0

    def to_snapshot(self, timestamp: int) -> ProgressSnapshot:
        return ProgressSnapshot(
            timestamp=timestamp,
            progress=self.overall_progress,
            total=self.total,
            completed=self.completed,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "overall_progress": self.overall_progress,
        }


def compute_stats(forest: Forest) -> ProgressStats:
    """
    Compute node counts and the root-averaged progress of a forest.

    Args:
        forest: The forest of the current view, before any search pruning.

    Returns:
        ProgressStats; an empty forest gives all zeros.
    """
    total = 0
    completed = 0
    for node in forest.walk():
        total += 1
        if node.computed_progress == 100:
            completed += 1

    roots = forest.root_nodes()
    overall = sum(node.computed_progress for node in roots) / len(roots) if roots else 0.0

    return ProgressStats(total=total, completed=completed, overall_progress=overall)
