# tests/test_exceptions.py
"""
Tests for the Ascend exception hierarchy.
"""

import pytest

from ascend.exceptions import (
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


class TestExceptionHierarchy:
    """Every Ascend error can be caught as AscendError."""

    @pytest.mark.parametrize(
        "exc",
        [
            ConfigError(),
            StorageError(),
            RecordStoreError(),
            RecordWriteError(),
            CascadeError("delete", ["a"]),
            GoalNotFoundError("a"),
            HistoryStorageError(),
            SuggestionError(),
        ],
    )
    def test_base_class(self, exc):
        assert isinstance(exc, AscendError)

    def test_write_errors_are_store_errors(self):
        assert issubclass(RecordWriteError, RecordStoreError)
        assert issubclass(RecordStoreError, StorageError)
        assert issubclass(HistoryStorageError, StorageError)

    def test_not_found_is_a_write_error(self):
        """Writes against unknown ids surface as non-retryable write errors."""
        err = GoalNotFoundError("g-42")
        assert isinstance(err, RecordWriteError)
        assert err.retryable is False
        assert err.goal_ids == ["g-42"]
        assert "g-42" in str(err)


class TestRecordWriteError:
    """Tests for RecordWriteError attributes."""

    def test_defaults(self):
        err = RecordWriteError()
        assert err.goal_ids == []
        assert err.retryable is True

    def test_goal_ids_materialized(self):
        err = RecordWriteError("boom", goal_ids=(i for i in ["a", "b"]), retryable=False)
        assert err.goal_ids == ["a", "b"]
        assert err.retryable is False
        assert str(err) == "boom"


class TestCascadeError:
    """Tests for CascadeError bookkeeping."""

    def test_ids_and_message(self):
        err = CascadeError("toggle_complete", failed_ids=["b", "c"], succeeded_ids=["a"])
        assert err.operation == "toggle_complete"
        assert err.failed_ids == ["b", "c"]
        assert err.succeeded_ids == ["a"]
        assert err.goal_ids == ["b", "c"]
        assert err.retryable is True
        assert "2 failed, 1 succeeded" in str(err)

    def test_catchable_as_write_error(self):
        with pytest.raises(RecordWriteError):
            raise CascadeError("delete", ["x"])


class TestSuggestionError:
    def test_message_names_provider(self):
        err = SuggestionError("gemini", "no key")
        assert err.provider_name == "gemini"
        assert "gemini" in str(err)
        assert "no key" in str(err)
