# tests/storage/test_json_store.py
"""
Tests for JsonGoalStore persistence.
"""

import asyncio
import json

import pytest

from ascend.exceptions import GoalNotFoundError, RecordWriteError
from ascend.storage import JsonGoalStore
from factories import make_goal


@pytest.fixture
def goals_path(tmp_path):
    return tmp_path / "data" / "goals.json"


@pytest.fixture
def store(goals_path):
    return JsonGoalStore(str(goals_path))


class TestJsonGoalStore:
    """Tests for the file-backed store."""

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, store):
        assert await store.list_goals() == []

    @pytest.mark.asyncio
    async def test_create_writes_wire_format(self, store, goals_path):
        await store.create_goal(make_goal("a", "Swim", due_at=100))
        raw = json.loads(goals_path.read_text())
        assert raw["goals"][0]["id"] == "a"
        assert raw["goals"][0]["oneTimeTask"] == 100
        assert raw["goals"][0]["parentId"] is None
        assert not goals_path.with_suffix(".tmp").exists()

    @pytest.mark.asyncio
    async def test_roundtrip_order(self, store):
        for goal_id in ("a", "b", "c"):
            await store.create_goal(make_goal(goal_id))
        await store.replace_goal(make_goal("b", "edited"))
        goals = await store.list_goals()
        assert [g.id for g in goals] == ["a", "b", "c"]
        assert goals[1].title == "edited"

    @pytest.mark.asyncio
    async def test_duplicate_create(self, store):
        await store.create_goal(make_goal("a"))
        with pytest.raises(RecordWriteError):
            await store.create_goal(make_goal("a"))

    @pytest.mark.asyncio
    async def test_replace_unknown(self, store):
        with pytest.raises(GoalNotFoundError):
            await store.replace_goal(make_goal("zz"))

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.replace_all([make_goal("a"), make_goal("b")])
        await store.delete_goal("a")
        await store.delete_goal("missing")
        assert [g.id for g in await store.list_goals()] == ["b"]

    @pytest.mark.asyncio
    async def test_concurrent_writes_all_land(self, store):
        await asyncio.gather(*(store.create_goal(make_goal(f"g{i}")) for i in range(10)))
        assert len(await store.list_goals()) == 10

    @pytest.mark.asyncio
    async def test_malformed_file_reads_empty(self, goals_path, store):
        goals_path.parent.mkdir(parents=True)
        goals_path.write_text("[1, 2")
        assert await store.list_goals() == []

    @pytest.mark.asyncio
    async def test_write_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        store = JsonGoalStore(str(blocker / "goals.json"))
        with pytest.raises(RecordWriteError) as exc_info:
            await store.create_goal(make_goal("a"))
        assert exc_info.value.goal_ids == ["a"]

    @pytest.mark.asyncio
    async def test_progress_report(self, store, now, now_ms):
        await store.create_goal(make_goal("done", is_completed=True, progress=100, completed_at=now_ms))
        report = await store.progress_report(now)
        assert report.weekly[-1].goal_ids == ["done"]
