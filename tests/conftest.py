# tests/conftest.py
"""
Shared fixtures for the Ascend test suite.

Provides a fixed reference time, a small goal tree, and a pre-populated
in-memory record store.
"""

import pytest

from ascend.storage import InMemoryGoalStore
from factories import REFERENCE_NOW, REFERENCE_NOW_MS, make_goal


@pytest.fixture
def now():
    """Fixed local reference time (a Wednesday afternoon)."""
    return REFERENCE_NOW


@pytest.fixture
def now_ms():
    """Fixed reference time in epoch milliseconds."""
    return REFERENCE_NOW_MS


@pytest.fixture
def three_level_goals():
    """
    A (root) -> B -> C, plus an unrelated root D.

    Storage order: A, B, C, D.
    """
    return [
        make_goal("A", "Launch product", expanded=True),
        make_goal("B", "Write docs", parent_id="A", progress=40, expanded=True),
        make_goal("C", "Proofread docs", parent_id="B", progress=80),
        make_goal("D", "Plan holiday", progress=10),
    ]


@pytest.fixture
def memory_store(three_level_goals):
    """In-memory store holding the three-level tree."""
    return InMemoryGoalStore(three_level_goals)
