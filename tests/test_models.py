# tests/test_models.py
"""
Tests for the Ascend data models.

Covers:
- Goal validation (progress clamping, weekday checks)
- camelCase wire format round-trips
- ProgressSnapshot, SubgoalSuggestion and ProgressReport serialization
"""

import pytest
from pydantic import ValidationError

from ascend.models import Goal, ProgressBucket, ProgressReport, ProgressSnapshot, SubgoalSuggestion


class TestGoal:
    """Tests for the Goal record model."""

    def test_create_defaults(self):
        """A fresh goal is incomplete, at 0% and expanded."""
        goal = Goal.create("Learn Rust", parent_id="p1", description="Ownership first")
        assert goal.title == "Learn Rust"
        assert goal.parent_id == "p1"
        assert goal.description == "Ownership first"
        assert goal.progress == 0
        assert goal.is_completed is False
        assert goal.expanded is True
        assert goal.completed_at is None
        assert goal.id

    def test_create_generates_unique_ids(self):
        assert Goal.create("a").id != Goal.create("a").id

    @pytest.mark.parametrize("raw,expected", [(-5, 0), (0, 0), (42.4, 42), (42.6, 43), (150, 100), (None, 0)])
    def test_progress_clamped(self, raw, expected):
        assert Goal(id="g", title="t", progress=raw).progress == expected

    def test_progress_rejects_bool(self):
        with pytest.raises(ValidationError):
            Goal(id="g", title="t", progress=True)

    def test_scheduled_days_validated(self):
        with pytest.raises(ValidationError):
            Goal(id="g", title="t", scheduled_days=[7])

    def test_scheduled_days_deduplicated(self):
        goal = Goal(id="g", title="t", scheduled_days=[1, 3, 1])
        assert goal.scheduled_days == [1, 3]

    def test_to_dict_uses_wire_names(self):
        """Serialization uses camelCase aliases and keeps parentId for roots."""
        goal = Goal(
            id="g1",
            title="Run",
            created_at=1000,
            scheduled_days=[0],
            due_at=5000,
            is_completed=True,
            completed_at=2000,
            progress=100,
        )
        data = goal.to_dict()
        assert data["parentId"] is None
        assert data["isCompleted"] is True
        assert data["createdAt"] == 1000
        assert data["completedAt"] == 2000
        assert data["scheduledDays"] == [0]
        assert data["oneTimeTask"] == 5000
        assert "reminder" not in data
        assert "description" not in data

    def test_from_dict_accepts_wire_format(self):
        goal = Goal.from_dict(
            {
                "id": "x",
                "title": "Read",
                "parentId": "p",
                "isCompleted": False,
                "progress": 30,
                "createdAt": 10,
                "oneTimeTask": 20,
                "unknownField": "ignored",
            }
        )
        assert goal.parent_id == "p"
        assert goal.due_at == 20
        assert goal.created_at == 10

    def test_from_dict_roundtrip(self):
        goal = Goal(id="r", title="Round", parent_id="p", reminder=99, created_at=1)
        assert Goal.from_dict(goal.to_dict()) == goal


class TestSnapshotsAndReports:
    """Tests for history snapshots, suggestions and reports."""

    def test_snapshot_fields(self):
        snap = ProgressSnapshot(timestamp=1, progress=12.5, total=4, completed=1)
        assert snap.model_dump() == {"timestamp": 1, "progress": 12.5, "total": 4, "completed": 1}

    def test_suggestion_title_stripped(self):
        suggestion = SubgoalSuggestion(title="  Draft outline  ")
        assert suggestion.title == "Draft outline"
        assert suggestion.description == ""

    def test_suggestion_rejects_blank_title(self):
        with pytest.raises(ValidationError):
            SubgoalSuggestion(title="   ")

    def test_report_to_dict(self):
        report = ProgressReport(
            weekly=[ProgressBucket(day=5, progress=2, goal_ids=["a", "b"])],
            yearly=[ProgressBucket(month=3, progress=0)],
        )
        data = report.to_dict()
        assert data["weekly"] == [{"day": 5, "progress": 2, "goalIds": ["a", "b"]}]
        assert data["monthly"] == []
        assert data["yearly"] == [{"month": 3, "progress": 0, "goalIds": []}]
