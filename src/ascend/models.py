# src/ascend/models.py
"""
Core data models for the Ascend goal tracker.

This module defines the Pydantic models for the persisted goal record, the
progress history snapshot, sub-goal suggestions and the progress-by-period
report. Field names are snake_case in Python; the wire format (JSON bodies
exchanged with the record store and the history slot) uses the camelCase
aliases declared on each field.
"""

import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils.clock import now_ms

# Keys emitted even when their value is None, so roots round-trip as
# ``"parentId": null`` instead of losing the field.
_ALWAYS_SERIALIZED = frozenset({"parentId"})


class Goal(BaseModel):
    """
    A flat, persisted goal/task record, possibly parented to another goal.

    Attributes:
        id: Opaque unique identifier.
        title: Short title shown in lists and matched by search.
        description: Optional longer text.
        parent_id: Identifier of the parent goal, or None for a root.
        progress: Manual progress 0-100, meaningful for leaves.
        is_completed: Completion flag.
        created_at: Creation time, epoch milliseconds.
        completed_at: Completion time, epoch milliseconds.
        scheduled_days: Recurring weekdays, 0 = Sunday ... 6 = Saturday.
        due_at: One-shot due time, epoch milliseconds.
        reminder: Reminder time, epoch milliseconds.
        expanded: UI expansion flag for the tree view.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique goal identifier.")
    title: str = Field(description="Goal title.")
    description: Optional[str] = Field(default=None, description="Optional longer description.")
    parent_id: Optional[str] = Field(default=None, alias="parentId", description="Parent goal id, None for roots.")
    progress: int = Field(default=0, description="Manual progress, 0-100.")
    is_completed: bool = Field(default=False, alias="isCompleted", description="Completion flag.")
    created_at: int = Field(default_factory=now_ms, alias="createdAt", description="Creation time (ms).")
    completed_at: Optional[int] = Field(default=None, alias="completedAt", description="Completion time (ms).")
    scheduled_days: Optional[List[int]] = Field(
        default=None, alias="scheduledDays", description="Recurring weekdays, 0 = Sunday."
    )
    due_at: Optional[int] = Field(default=None, alias="oneTimeTask", description="One-shot due time (ms).")
    reminder: Optional[int] = Field(default=None, description="Reminder time (ms).")
    expanded: Optional[bool] = Field(default=None, description="Tree view expansion flag.")

    @field_validator("progress", mode="before")
    @classmethod
    def clamp_progress(cls, v: Any) -> int:
        """Round and clamp progress into 0-100."""
        if v is None:
            return 0
        if isinstance(v, bool):
            raise ValueError("progress must be a number")
        return max(0, min(100, int(round(float(v)))))

    @field_validator("scheduled_days")
    @classmethod
    def check_scheduled_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        """Reject weekdays outside 0-6 and collapse duplicates."""
        if v is None:
            return None
        days: List[int] = []
        for day in v:
            if not 0 <= day <= 6:
                raise ValueError(f"Invalid weekday {day}. Must be between 0 (Sunday) and 6 (Saturday)")
            if day not in days:
                days.append(day)
        return days

    @classmethod
    def create(
        cls,
        title: str,
        parent_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> "Goal":
        """
        Factory for a fresh goal with generated id and timestamps.

        New goals start at 0% progress, not completed and expanded.
        """
        return cls(
            id=str(uuid.uuid4()),
            title=title,
            description=description,
            parent_id=parent_id,
            progress=0,
            is_completed=False,
            created_at=now_ms(),
            expanded=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase wire format, omitting unset optionals."""
        data = self.model_dump(by_alias=True)
        return {k: v for k, v in data.items() if v is not None or k in _ALWAYS_SERIALIZED}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        """Deserialize from the wire format."""
        return cls.model_validate(data)


class ProgressSnapshot(BaseModel):
    """One timestamped sample of aggregate progress statistics."""

    timestamp: int = Field(description="Sample time (ms).")
    progress: float = Field(description="Overall progress figure, 0-100.")
    total: int = Field(default=0, ge=0, description="Total node count.")
    completed: int = Field(default=0, ge=0, description="Completed node count.")


class SubgoalSuggestion(BaseModel):
    """A proposed sub-item returned by the suggestion service."""

    model_config = ConfigDict(extra="ignore")

    title: str
    description: str = ""

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Suggestion title must not be empty")
        return v


class ProgressBucket(BaseModel):
    """Completed-goal count for one day (``day``) or one month (``month``)."""

    model_config = ConfigDict(populate_by_name=True)

    day: Optional[int] = None
    month: Optional[int] = None
    progress: int = 0
    goal_ids: List[str] = Field(default_factory=list, alias="goalIds")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ProgressReport(BaseModel):
    """Weekly (7 days), monthly (30 days) and yearly (12 months) completion buckets."""

    weekly: List[ProgressBucket] = Field(default_factory=list)
    monthly: List[ProgressBucket] = Field(default_factory=list)
    yearly: List[ProgressBucket] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weekly": [b.to_dict() for b in self.weekly],
            "monthly": [b.to_dict() for b in self.monthly],
            "yearly": [b.to_dict() for b in self.yearly],
        }
