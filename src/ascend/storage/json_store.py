# src/ascend/storage/json_store.py
"""
JSON file-based goal-record store.

Stores the ordered record list in a single JSON file of the form
``{"goals": [...]}`` using the camelCase wire format. It uses aiofiles for
asynchronous file operations and writes atomically via
write-to-temp-then-rename.
"""

import asyncio
import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import aiofiles
import aiofiles.os as aios
from pydantic import ValidationError

from ..exceptions import GoalNotFoundError, RecordWriteError
from ..models import Goal, ProgressReport
from .report import build_progress_report

logger = logging.getLogger(__name__)


class JsonGoalStore:
    """
    Persists goals to one JSON file.

    Read-modify-write cycles are serialized with an asyncio lock so
    concurrent cascades do not overwrite each other's changes.

    Args:
        path: Path to the goals JSON file. Tilde and environment variables are expanded.

    Example:
        >>> store = JsonGoalStore("~/.local/share/ascend/goals.json")
        >>> goals = await store.list_goals()
    """

    def __init__(self, path: str = "~/.local/share/ascend/goals.json") -> None:
        self._path = Path(os.path.expanduser(os.path.expandvars(path)))
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def list_goals(self) -> List[Goal]:
        """Load all goals; a missing or unreadable file gives an empty list."""
        return await self._read_all()

    async def create_goal(self, goal: Goal) -> Goal:
        async with self._lock:
            goals = await self._read_all()
            if any(existing.id == goal.id for existing in goals):
                raise RecordWriteError(f"Goal '{goal.id}' already exists.", goal_ids=[goal.id], retryable=False)
            goals.append(goal)
            await self._write_all(goals, [goal.id])
        return goal

    async def replace_goal(self, goal: Goal) -> Goal:
        async with self._lock:
            goals = await self._read_all()
            for i, existing in enumerate(goals):
                if existing.id == goal.id:
                    goals[i] = goal
                    break
            else:
                raise GoalNotFoundError(goal.id)
            await self._write_all(goals, [goal.id])
        return goal

    async def replace_all(self, goals: List[Goal]) -> List[Goal]:
        async with self._lock:
            await self._write_all(goals, [g.id for g in goals])
        return list(goals)

    async def delete_goal(self, goal_id: str) -> None:
        async with self._lock:
            goals = await self._read_all()
            remaining = [g for g in goals if g.id != goal_id]
            if len(remaining) != len(goals):
                await self._write_all(remaining, [goal_id])

    async def progress_report(self, now: Optional[datetime] = None) -> ProgressReport:
        return build_progress_report(await self._read_all(), now)

    async def _read_all(self) -> List[Goal]:
        if not await aios.path.exists(self._path):
            return []

        try:
            async with aiofiles.open(self._path, mode="r", encoding="utf-8") as f:
                raw = await f.read()
            data = json.loads(raw)
            goals = [Goal.from_dict(g) for g in data.get("goals", [])]
        except (OSError, ValueError, AttributeError, ValidationError) as exc:
            logger.error("Failed to load goals from %s: %s", self._path, exc)
            return []

        logger.debug("Loaded %d goals from %s", len(goals), self._path)
        return goals

    async def _write_all(self, goals: List[Goal], affected_ids: List[str]) -> None:
        """Atomically write all goals to disk."""
        payload = json.dumps({"goals": [g.to_dict() for g in goals]}, indent=2)
        tmp_path = self._path.with_suffix(".tmp")
        try:
            await aios.makedirs(self._path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(payload)
            await aios.replace(tmp_path, self._path)
        except OSError as exc:
            logger.error("Failed to write goals to %s: %s", self._path, exc)
            raise RecordWriteError(f"Failed to write goals to '{self._path}': {exc}", goal_ids=affected_ids)
