# tests/core/test_cascade.py
"""
Tests for cascading mutations.

Covers:
- Subtree collection (pre-order, cycle-safe)
- Sibling swaps with non-adjacent siblings
- Delete, toggle-complete and move through a store
- Partial failure reporting
"""

from unittest.mock import AsyncMock

import pytest

from ascend.core.cascade import CascadeMutator, collect_subtree_ids, swap_with_sibling
from ascend.core.tree import build_forest
from ascend.exceptions import CascadeError, GoalNotFoundError
from ascend.storage import InMemoryGoalStore
from factories import make_goal


class TestCollectSubtreeIds:
    def test_target_first_pre_order(self, three_level_goals):
        assert collect_subtree_ids(three_level_goals, "A") == ["A", "B", "C"]

    def test_leaf(self, three_level_goals):
        assert collect_subtree_ids(three_level_goals, "C") == ["C"]

    def test_unknown_target(self, three_level_goals):
        assert collect_subtree_ids(three_level_goals, "nope") == []

    def test_cycle_terminates(self):
        goals = [make_goal("a", parent_id="b"), make_goal("b", parent_id="a")]
        assert sorted(collect_subtree_ids(goals, "a")) == ["a", "b"]


class TestSwapWithSibling:
    def _goals(self):
        return [
            make_goal("r1"),
            make_goal("x", parent_id="r1"),
            make_goal("r2"),
            make_goal("y", parent_id="r1"),
            make_goal("r3"),
        ]

    def test_swaps_non_adjacent_siblings(self):
        reordered = swap_with_sibling(self._goals(), "y", "up")
        assert [g.id for g in reordered] == ["r1", "y", "r2", "x", "r3"]

    def test_root_siblings(self):
        reordered = swap_with_sibling(self._goals(), "r2", "down")
        assert [g.id for g in reordered] == ["r1", "x", "r3", "y", "r2"]

    def test_first_cannot_move_up(self):
        assert swap_with_sibling(self._goals(), "r1", "up") is None

    def test_last_cannot_move_down(self):
        assert swap_with_sibling(self._goals(), "y", "down") is None

    def test_unknown_target(self):
        assert swap_with_sibling(self._goals(), "zz", "up") is None

    def test_invalid_direction(self):
        with pytest.raises(ValueError):
            swap_with_sibling(self._goals(), "x", "left")

    def test_input_not_mutated(self):
        goals = self._goals()
        swap_with_sibling(goals, "y", "up")
        assert [g.id for g in goals] == ["r1", "x", "r2", "y", "r3"]


class TestCascadeMutator:
    """Tests for CascadeMutator against an in-memory store."""

    @pytest.mark.asyncio
    async def test_delete_removes_subtree(self, memory_store, three_level_goals):
        mutator = CascadeMutator(memory_store)
        deleted = await mutator.delete(three_level_goals, "A")
        assert deleted == ["A", "B", "C"]
        assert [g.id for g in await memory_store.list_goals()] == ["D"]

    @pytest.mark.asyncio
    async def test_delete_unknown_is_noop(self, memory_store, three_level_goals):
        assert await CascadeMutator(memory_store).delete(three_level_goals, "zz") == []
        assert len(await memory_store.list_goals()) == 4

    @pytest.mark.asyncio
    async def test_toggle_complete_overwrites_descendants(self, memory_store, three_level_goals):
        mutator = CascadeMutator(memory_store)
        updated = await mutator.toggle_complete(three_level_goals, "B", now=5_000)
        assert [g.id for g in updated] == ["B", "C"]

        stored = {g.id: g for g in await memory_store.list_goals()}
        for goal_id in ("B", "C"):
            assert stored[goal_id].is_completed is True
            assert stored[goal_id].progress == 100
            assert stored[goal_id].completed_at == 5_000
        assert stored["A"].is_completed is False

        forest = build_forest(stored.values())
        assert forest.nodes["A"].computed_progress == 100

    @pytest.mark.asyncio
    async def test_toggle_back_resets_progress(self, memory_store, three_level_goals):
        mutator = CascadeMutator(memory_store)
        await mutator.toggle_complete(three_level_goals, "B", now=5_000)
        completed = await memory_store.list_goals()
        await mutator.toggle_complete(completed, "B")

        stored = {g.id: g for g in await memory_store.list_goals()}
        assert stored["B"].is_completed is False
        assert stored["C"].progress == 0
        assert stored["C"].completed_at is None

    @pytest.mark.asyncio
    async def test_toggle_unknown_target(self, memory_store, three_level_goals):
        assert await CascadeMutator(memory_store).toggle_complete(three_level_goals, "zz") == []

    @pytest.mark.asyncio
    async def test_move_persists_full_list(self, memory_store, three_level_goals):
        mutator = CascadeMutator(memory_store)
        reordered = await mutator.move(three_level_goals, "D", "up")
        assert [g.id for g in reordered] == ["D", "B", "C", "A"]
        assert [g.id for g in await memory_store.list_goals()] == ["D", "B", "C", "A"]

    @pytest.mark.asyncio
    async def test_impossible_move_writes_nothing(self, three_level_goals):
        store = AsyncMock()
        assert await CascadeMutator(store).move(three_level_goals, "A", "up") is None
        store.replace_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_failure_reports_ids(self, three_level_goals):
        """Every request is attempted; failures are reported together."""
        store = AsyncMock()

        async def delete(goal_id):
            if goal_id == "B":
                raise GoalNotFoundError(goal_id)

        store.delete_goal.side_effect = delete
        with pytest.raises(CascadeError) as exc_info:
            await CascadeMutator(store).delete(three_level_goals, "A")

        err = exc_info.value
        assert err.operation == "delete"
        assert err.failed_ids == ["B"]
        assert sorted(err.succeeded_ids) == ["A", "C"]
        assert store.delete_goal.await_count == 3
