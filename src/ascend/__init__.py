# src/ascend/__init__.py
"""
Ascend - a hierarchical goal tracker.

Goals are flat records linked by parent pointers. This library rebuilds them
into a forest, derives "today" and search views, rolls progress up the
tree, samples a progress history, fires reminders and applies cascading
edits through a pluggable goal-record store (in memory, a JSON file, or a
remote REST service).
"""

from importlib.metadata import PackageNotFoundError, version

from .core import (
    FlatGoal,
    Forest,
    GoalNode,
    ProgressStats,
    build_forest,
    compute_stats,
    filter_today,
    flatten_forest,
    search_forest,
)
from .exceptions import (
    AscendError,
    CascadeError,
    ConfigError,
    GoalNotFoundError,
    HistoryStorageError,
    RecordStoreError,
    RecordWriteError,
    StorageError,
    SuggestionError,
)
from .models import Goal, ProgressReport, ProgressSnapshot, SubgoalSuggestion
from .tracker import GoalTracker, GoalView

try:
    __version__ = version("ascend-goals")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    # Tracker
    "GoalTracker",
    "GoalView",
    # Models
    "Goal",
    "ProgressReport",
    "ProgressSnapshot",
    "SubgoalSuggestion",
    # Engine
    "FlatGoal",
    "Forest",
    "GoalNode",
    "ProgressStats",
    "build_forest",
    "compute_stats",
    "filter_today",
    "flatten_forest",
    "search_forest",
    # Exceptions
    "AscendError",
    "CascadeError",
    "ConfigError",
    "GoalNotFoundError",
    "HistoryStorageError",
    "RecordStoreError",
    "RecordWriteError",
    "StorageError",
    "SuggestionError",
    "__version__",
]
