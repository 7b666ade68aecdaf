"""Tests for configuration lookups and log level selection."""

from ordering.utils.config import custom_setting, custom_settings
from ordering.utils.logging import get_log_level


class TestCustomSettings:
    def test_reads_custom_section(self):
        settings = custom_settings()
        assert settings["TAX_RATE"] == 0.085
        assert settings["MAX_ITEM_QUANTITY"] == 10

    def test_default_for_missing_key(self):
        assert custom_setting("NOT_CONFIGURED", 42) == 42

    def test_configured_value_wins(self):
        assert custom_setting("ESTIMATED_DELIVERY_DAYS", 99) == 3


class TestLogLevel:
    def test_explicit_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert get_log_level() == "ERROR"

    def test_level_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert get_log_level() == "INFO"

    def test_test_environment_is_quiet(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", "test")
        assert get_log_level() == "WARNING"
