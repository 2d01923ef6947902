"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from finance_tracker.config import AppSettings, DemoSettings, get_settings, validate_all_settings


class TestSettings:
    """Environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FINANCE_RECENT_TRANSACTIONS_LIMIT", raising=False)
        monkeypatch.delenv("FINANCE_DEFAULT_TIME_FRAME", raising=False)
        settings = AppSettings(_env_file=None)
        assert settings.recent_transactions_limit == 5
        assert settings.default_time_frame == "7days"
        assert settings.seed_demo_data is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FINANCE_RECENT_TRANSACTIONS_LIMIT", "10")
        monkeypatch.setenv("DEMO_USERNAME", "sandbox")
        assert AppSettings(_env_file=None).recent_transactions_limit == 10
        assert DemoSettings(_env_file=None).username == "sandbox"

    def test_unknown_time_frame_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None, default_time_frame="fortnight")

    def test_hash_rounds_bounded(self):
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None, password_hash_rounds=3)

    def test_validate_all_settings(self):
        get_settings.cache_clear()
        results = validate_all_settings()
        assert results["app"] is True
        assert results["demo"] is True
