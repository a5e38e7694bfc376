# tests/config/test_tracker_config.py
"""
Tests for the tracker configuration models and the default config file.
"""

import pytest
from pydantic import ValidationError

from ascend.config import (
    HistoryConfig,
    RemindersConfig,
    StoreConfig,
    SuggestionsConfig,
    TrackerConfig,
    load_default_config,
)


class TestDefaults:
    """Defaults mirror the packaged default_config.toml."""

    def test_model_defaults(self):
        config = TrackerConfig()
        assert config.store.backend == "json"
        assert config.history.max_entries == 50
        assert config.history.min_interval_seconds == 60.0
        assert config.history.progress_threshold == 1.0
        assert config.reminders.scan_interval_seconds == 10.0
        assert config.reminders.window_seconds == 60.0
        assert config.scheduler.tick_seconds == 1.0
        assert config.suggestions.model == "gemini-2.5-flash"

    def test_default_file_validates(self):
        data = load_default_config()
        config = TrackerConfig.model_validate(data)
        assert config.store.backend == "json"
        assert config.reminders.window_seconds == 60.0
        assert config.logging["file_mode"] == "per_run"


class TestValidation:
    """Cross-field rules."""

    def test_http_backend_requires_url(self):
        with pytest.raises(ValidationError):
            StoreConfig(backend="http")

    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            StoreConfig(backend="redis")

    def test_path_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ASCEND_TEST_DIR", str(tmp_path))
        assert StoreConfig(path="$ASCEND_TEST_DIR/goals.json").path == f"{tmp_path}/goals.json"

    def test_window_must_exceed_interval(self):
        with pytest.raises(ValidationError):
            RemindersConfig(scan_interval_seconds=60, window_seconds=60)

    def test_tick_not_longer_than_scan(self):
        with pytest.raises(ValidationError):
            TrackerConfig(scheduler={"tick_seconds": 20}, reminders={"scan_interval_seconds": 10})

    def test_history_bounds(self):
        with pytest.raises(ValidationError):
            HistoryConfig(max_entries=0)
        with pytest.raises(ValidationError):
            HistoryConfig(progress_threshold=-1)

    def test_suggestion_item_bounds(self):
        with pytest.raises(ValidationError):
            SuggestionsConfig(min_items=6, max_items=5)


class TestApiKeyResolution:
    """The suggestion API key falls back to the environment."""

    def test_explicit_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        assert SuggestionsConfig(api_key="explicit").api_key == "explicit"

    def test_env_substitution(self, monkeypatch):
        monkeypatch.setenv("MY_GEMINI_KEY", "substituted")
        assert SuggestionsConfig(api_key="${MY_GEMINI_KEY}").api_key == "substituted"

    def test_gemini_env_fallback(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "gemini")
        monkeypatch.setenv("API_KEY", "generic")
        assert SuggestionsConfig().api_key == "gemini"

    def test_generic_env_fallback(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "generic")
        assert SuggestionsConfig().api_key == "generic"
