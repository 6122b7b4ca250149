"""Tests for configuration loading."""

import pytest

from arrivals_notifier.config import Config
from arrivals_notifier.errors import ConfigurationError

CONFIG_VARS = [
    "GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL", "SEARCH_GROUNDING", "AIRPORT_CODE",
    "AIRPORT_TIMEZONE", "SYNC_INTERVAL_SECONDS", "SYNC_SINGLE_FLIGHT", "NOTIFY_DEDUP_KEY",
    "DISCORD_BOT_TOKEN", "DISCORD_CHANNEL_ID", "REQUEST_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in CONFIG_VARS:
        monkeypatch.delenv(var, raising=False)


class TestConfig:
    """Tests for Config."""

    def test_defaults(self) -> None:
        config = Config()

        assert config.airport_code == "KEJ"
        assert config.airport_timezone == "Asia/Novokuznetsk"
        assert config.sync_interval_seconds == 60
        assert config.sync_single_flight is False
        assert config.search_grounding is True
        assert config.notify_dedup_key == "id"
        assert config.notifications_enabled is False

    def test_missing_api_key_does_not_fail_startup(self) -> None:
        config = Config()
        with pytest.raises(ConfigurationError):
            config.get_api_key()

    def test_api_key_read_lazily(self, monkeypatch) -> None:
        config = Config()
        monkeypatch.setenv("GEMINI_API_KEY", "late-key")
        assert config.get_api_key() == "late-key"

    def test_api_key_fallback_variable(self, monkeypatch) -> None:
        monkeypatch.setenv("API_KEY", "fallback")
        assert Config().get_api_key() == "fallback"

    def test_invalid_interval(self, monkeypatch) -> None:
        monkeypatch.setenv("SYNC_INTERVAL_SECONDS", "0")
        with pytest.raises(ValueError):
            Config()

    def test_invalid_timezone(self, monkeypatch) -> None:
        monkeypatch.setenv("AIRPORT_TIMEZONE", "Mars/Olympus")
        with pytest.raises(ValueError):
            Config()

    def test_invalid_dedup_key(self, monkeypatch) -> None:
        monkeypatch.setenv("NOTIFY_DEDUP_KEY", "hash")
        with pytest.raises(ValueError):
            Config()

    def test_discord_requires_numeric_channel(self, monkeypatch) -> None:
        monkeypatch.setenv("DISCORD_BOT_TOKEN", "token")
        monkeypatch.setenv("DISCORD_CHANNEL_ID", "general")
        with pytest.raises(ValueError):
            Config()

    def test_discord_enables_notifications(self, monkeypatch) -> None:
        monkeypatch.setenv("DISCORD_BOT_TOKEN", "token")
        monkeypatch.setenv("DISCORD_CHANNEL_ID", "123456")
        assert Config().notifications_enabled is True
