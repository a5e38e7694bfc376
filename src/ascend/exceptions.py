# src/ascend/exceptions.py
"""
Custom exceptions for the Ascend goal tracker.

This module defines a hierarchy of exception classes so callers can tell
configuration problems, record-store failures and history persistence
failures apart and handle each one where it makes sense.

Nothing raised from here is fatal to the process: read paths degrade to an
empty state, while write paths surface a :class:`RecordWriteError` that the
caller may retry.
"""

from typing import Iterable, Optional


class AscendError(Exception):
    """Base class for all Ascend specific errors."""
    def __init__(self, message: str = "An unspecified error occurred in Ascend."):
        super().__init__(message)


class ConfigError(AscendError):
    """Raised for errors related to configuration loading or validation."""
    def __init__(self, message: str = "Configuration error."):
        super().__init__(message)


class StorageError(AscendError):
    """Base class for errors related to storage operations."""
    def __init__(self, message: str = "Storage error."):
        super().__init__(message)


class RecordStoreError(StorageError):
    """Raised when the goal-record store cannot be reached or returns garbage."""
    def __init__(self, message: str = "Goal record store error."):
        super().__init__(message)


class RecordWriteError(RecordStoreError):
    """
    Raised when a write against the goal-record store fails.

    Writes are independent and never retried automatically; ``retryable``
    tells the caller whether issuing the same request again can succeed.
    """
    def __init__(
        self,
        message: str = "Goal record write failed.",
        goal_ids: Optional[Iterable[str]] = None,
        retryable: bool = True,
    ):
        self.goal_ids = list(goal_ids or [])
        self.retryable = retryable
        super().__init__(message)


class CascadeError(RecordWriteError):
    """
    Raised after a cascade when some of its independent writes failed.

    Every request of the cascade has been attempted by the time this is
    raised, so ``succeeded_ids`` are already applied in the store.
    """
    def __init__(
        self,
        operation: str,
        failed_ids: Iterable[str],
        succeeded_ids: Iterable[str] = (),
    ):
        self.operation = operation
        self.failed_ids = list(failed_ids)
        self.succeeded_ids = list(succeeded_ids)
        super().__init__(
            f"Cascade '{operation}' partially failed: "
            f"{len(self.failed_ids)} failed, {len(self.succeeded_ids)} succeeded.",
            goal_ids=self.failed_ids,
        )


class GoalNotFoundError(RecordWriteError):
    """
    Raised when an operation targets a goal identifier that does not exist.
    Retrying the same request cannot succeed.
    """
    def __init__(self, goal_id: str, message: str = "Goal not found."):
        self.goal_id = goal_id
        super().__init__(f"{message} Goal ID: '{goal_id}'", goal_ids=[goal_id], retryable=False)


class HistoryStorageError(StorageError):
    """Raised when the progress history slot cannot be written."""
    def __init__(self, message: str = "Progress history storage error."):
        super().__init__(message)


class SuggestionError(AscendError):
    """Raised inside the suggestion service; never escapes its public API."""
    def __init__(self, provider_name: str = "Unknown", message: str = "Suggestion error."):
        self.provider_name = provider_name
        super().__init__(f"Error with suggestion provider '{provider_name}': {message}")
