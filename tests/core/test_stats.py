# tests/core/test_stats.py
"""
Tests for forest statistics.
"""

import pytest

from ascend.core.stats import ProgressStats, compute_stats
from ascend.core.tree import build_forest
from factories import make_goal


class TestComputeStats:
    """Counts cover every node; overall progress averages roots only."""

    def test_empty(self):
        stats = compute_stats(build_forest([]))
        assert stats == ProgressStats(total=0, completed=0, overall_progress=0.0)

    def test_counts_all_nodes(self, three_level_goals):
        stats = compute_stats(build_forest(three_level_goals))
        assert stats.total == 4
        assert stats.completed == 0
        # Roots: A (80) and D (10).
        assert stats.overall_progress == pytest.approx(45.0)

    def test_completed_counts_internal_nodes_at_100(self):
        goals = [
            make_goal("p"),
            make_goal("x", parent_id="p", is_completed=True),
            make_goal("y", parent_id="p", progress=100),
        ]
        stats = compute_stats(build_forest(goals))
        # p derives 100 from its children and counts as completed too.
        assert stats.total == 3
        assert stats.completed == 3
        assert stats.overall_progress == 100

    def test_root_average_differs_from_node_ratio(self):
        goals = [
            make_goal("r1"),
            make_goal("c1", parent_id="r1", is_completed=True),
            make_goal("c2", parent_id="r1", is_completed=True),
            make_goal("c3", parent_id="r1", is_completed=True),
            make_goal("r2", progress=0),
        ]
        stats = compute_stats(build_forest(goals))
        assert stats.completed == 4
        assert stats.total == 5
        assert stats.overall_progress == pytest.approx(50.0)

    def test_snapshot(self):
        stats = ProgressStats(total=3, completed=1, overall_progress=33.3)
        snap = stats.to_snapshot(1234)
        assert snap.timestamp == 1234
        assert snap.progress == 33.3
        assert snap.total == 3
        assert snap.completed == 1
