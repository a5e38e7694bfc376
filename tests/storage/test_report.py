# tests/storage/test_report.py
"""
Tests for the progress-by-period report.
"""

from datetime import datetime, timedelta

from ascend.storage.report import build_progress_report
from ascend.utils.clock import to_ms
from factories import REFERENCE_NOW, make_goal


def completed(goal_id: str, when: datetime):
    return make_goal(goal_id, is_completed=True, progress=100, completed_at=to_ms(when))


class TestBuildProgressReport:
    """Bucket shapes and membership."""

    def test_shapes(self):
        report = build_progress_report([], REFERENCE_NOW)
        assert len(report.weekly) == 7
        assert len(report.monthly) == 30
        assert len(report.yearly) == 12
        assert report.weekly[-1].day == 12
        assert report.weekly[0].day == 6
        assert [b.month for b in report.yearly] == list(range(1, 13))

    def test_daily_buckets(self):
        goals = [
            completed("today", REFERENCE_NOW),
            completed("yesterday", REFERENCE_NOW - timedelta(days=1)),
            completed("old", REFERENCE_NOW - timedelta(days=20)),
        ]
        report = build_progress_report(goals, REFERENCE_NOW)
        assert report.weekly[-1].goal_ids == ["today"]
        assert report.weekly[-2].progress == 1
        assert sum(b.progress for b in report.weekly) == 2
        assert sum(b.progress for b in report.monthly) == 3

    def test_yearly_buckets(self):
        goals = [
            completed("jan", datetime(2025, 1, 15, 12)),
            completed("mar", datetime(2025, 3, 1, 0, 0)),
            completed("last_year", datetime(2024, 12, 31, 23)),
        ]
        report = build_progress_report(goals, REFERENCE_NOW)
        assert report.yearly[0].goal_ids == ["jan"]
        assert report.yearly[2].goal_ids == ["mar"]
        assert sum(b.progress for b in report.yearly) == 2

    def test_ignores_incomplete_or_untimed(self):
        goals = [
            make_goal("open", completed_at=to_ms(REFERENCE_NOW)),
            make_goal("untimed", is_completed=True),
        ]
        report = build_progress_report(goals, REFERENCE_NOW)
        assert all(b.progress == 0 for b in report.weekly + report.monthly + report.yearly)
