# src/ascend/core/history.py
"""
Progress History Tracking.

Samples aggregate statistics into a capped, debounced series of
:class:`~ascend.models.ProgressSnapshot` entries, most recent last, and
keeps a durable copy in a single named slot.

A new sample is appended iff:
- there is no previous entry, or
- more than ``min_interval_ms`` elapsed since the previous entry, or
- overall progress moved by more than ``progress_threshold``.

The durable copy and the in-session copy share one threshold, so both
always hold the same series.

Example:
    store = JsonHistoryStore("~/.local/share/ascend/history.json")
    tracker = HistoryTracker(store)
    await tracker.load()

    appended = await tracker.record(compute_stats(forest))
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Protocol, runtime_checkable

import aiofiles
import aiofiles.os as aios
from pydantic import ValidationError

from ..exceptions import HistoryStorageError
from ..models import ProgressSnapshot
from ..utils.clock import now_ms
from .stats import ProgressStats

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 50
DEFAULT_MIN_INTERVAL_MS = 60_000
DEFAULT_PROGRESS_THRESHOLD = 1.0


# =============================================================================
# Durable Slot
# =============================================================================


@runtime_checkable
class HistoryStore(Protocol):
    """Protocol for the durable history slot."""

    async def load_snapshots(self) -> List[ProgressSnapshot]: ...
    async def save_snapshots(self, snapshots: List[ProgressSnapshot]) -> None: ...


class InMemoryHistoryStore:
    """Process-local history slot, handy for tests and embedding."""

    def __init__(self, snapshots: Optional[List[ProgressSnapshot]] = None) -> None:
        self._snapshots = list(snapshots or [])

    async def load_snapshots(self) -> List[ProgressSnapshot]:
        return list(self._snapshots)

    async def save_snapshots(self, snapshots: List[ProgressSnapshot]) -> None:
        self._snapshots = list(snapshots)


class JsonHistoryStore:
    """
    History slot kept as one JSON array in a file.

    Writes go to a temporary file that is then renamed over the slot, so a
    crash mid-write never leaves a truncated payload behind.

    Args:
        path: Path of the slot file. Tilde and environment variables are expanded.
    """

    def __init__(self, path: str = "~/.local/share/ascend/progress_history.json") -> None:
        self._path = Path(os.path.expanduser(os.path.expandvars(path)))

    @property
    def path(self) -> Path:
        return self._path

    async def load_snapshots(self) -> List[ProgressSnapshot]:
        """Read the slot. Missing or malformed payloads yield an empty history."""
        if not await aios.path.exists(self._path):
            return []

        try:
            async with aiofiles.open(self._path, mode="r", encoding="utf-8") as f:
                raw = await f.read()
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            snapshots = [ProgressSnapshot.model_validate(item) for item in data]
        except (OSError, ValueError, ValidationError) as exc:
            # json.JSONDecodeError is a ValueError
            logger.error("Ignoring malformed progress history in %s: %s", self._path, exc)
            return []

        logger.debug("Loaded %d history snapshots from %s", len(snapshots), self._path)
        return snapshots

    async def save_snapshots(self, snapshots: List[ProgressSnapshot]) -> None:
        """Atomically overwrite the slot."""
        payload = json.dumps([s.model_dump() for s in snapshots], indent=2)
        tmp_path = self._path.with_suffix(".tmp")
        try:
            await aios.makedirs(self._path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(payload)
            await aios.replace(tmp_path, self._path)
        except OSError as exc:
            logger.error("Failed to write progress history to %s: %s", self._path, exc)
            raise HistoryStorageError(f"Failed to write progress history to '{self._path}': {exc}")


# =============================================================================
# Tracker
# =============================================================================


class HistoryTracker:
    """
    Maintains the capped, debounced progress series.

    Args:
        store: Durable slot backend.
        max_entries: Cap on the series length; oldest entries age out first.
        min_interval_ms: Minimum spacing before an unchanged sample is kept.
        progress_threshold: Progress delta that forces a sample regardless of spacing.
    """

    def __init__(
        self,
        store: HistoryStore,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS,
        progress_threshold: float = DEFAULT_PROGRESS_THRESHOLD,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.store = store
        self.max_entries = max_entries
        self.min_interval_ms = min_interval_ms
        self.progress_threshold = progress_threshold
        self._snapshots: List[ProgressSnapshot] = []

    @classmethod
    def from_config(cls, config: Any, store: Optional[HistoryStore] = None) -> "HistoryTracker":
        """
        Create a tracker from a HistoryConfig.

        Args:
            config: A HistoryConfig instance.
            store: Optional slot override (default: JsonHistoryStore at config.storage_path).
        """
        if store is None:
            store = JsonHistoryStore(config.storage_path)
        return cls(
            store=store,
            max_entries=config.max_entries,
            min_interval_ms=int(config.min_interval_seconds * 1000),
            progress_threshold=config.progress_threshold,
        )

    @property
    def snapshots(self) -> List[ProgressSnapshot]:
        """A copy of the series, most recent last."""
        return list(self._snapshots)

    @property
    def last(self) -> Optional[ProgressSnapshot]:
        return self._snapshots[-1] if self._snapshots else None

    async def load(self) -> List[ProgressSnapshot]:
        """Load the durable series, keeping at most the newest ``max_entries``."""
        self._snapshots = (await self.store.load_snapshots())[-self.max_entries:]
        return self.snapshots

    def should_record(self, snapshot: ProgressSnapshot) -> bool:
        """Apply the debounce rule against the last stored entry."""
        last = self.last
        if last is None:
            return True
        if snapshot.timestamp - last.timestamp > self.min_interval_ms:
            return True
        return abs(snapshot.progress - last.progress) > self.progress_threshold

    async def record(self, stats: ProgressStats, timestamp: Optional[int] = None) -> bool:
        """
        Offer a new statistics sample.

        Args:
            stats: Freshly computed statistics.
            timestamp: Sample time in ms (defaults to now).

        Returns:
            True if the sample was appended and persisted.

        Raises:
            HistoryStorageError: If the slot write fails; the series is left unchanged.
        """
        snapshot = stats.to_snapshot(timestamp if timestamp is not None else now_ms())
        if not self.should_record(snapshot):
            return False

        snapshots = (self._snapshots + [snapshot])[-self.max_entries:]
        await self.store.save_snapshots(snapshots)
        self._snapshots = snapshots

        logger.debug(
            "Recorded progress snapshot: %.1f%% (%d/%d), %d entries",
            snapshot.progress,
            snapshot.completed,
            snapshot.total,
            len(self._snapshots),
        )
        return True
