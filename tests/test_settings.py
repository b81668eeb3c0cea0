"""Tests for application settings."""

import os

import pytest
from pydantic import ValidationError

from discord_guild_agent.config.settings import (
    AudioSettings,
    AuditSettings,
    DiscordSettings,
    PlaybackSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run each test without a .env file or leaked settings variables."""
    monkeypatch.chdir(tmp_path)
    for name in ("LOG_LEVEL", "ENVIRONMENT", "DEBUG"):
        monkeypatch.delenv(name, raising=False)
    for prefix in ("DISCORD__", "AUDIO__", "PLAYBACK__", "AUDIT__"):
        for key in [k for k in os.environ if k.startswith(prefix)]:
            monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()


class TestDefaults:
    def test_defaults(self):
        """Should provide the documented defaults."""
        settings = Settings()

        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.discord.command_prefix == "!"
        assert settings.audio.stream_quality == 2
        assert settings.audio.compat_mode is True
        assert settings.playback.idle_disconnect_seconds == 300.0
        assert settings.audit.log_channel_name == "server-logs"
        assert settings.audit.enabled is True
        assert settings.has_token is False


class TestEnvironment:
    """Tests for loading from environment variables."""

    def test_nested_variables(self, monkeypatch):
        """Should read nested sections using the ``__`` delimiter."""
        monkeypatch.setenv("DISCORD__TOKEN", "secret")
        monkeypatch.setenv("DISCORD__COMMAND_PREFIX", "?")
        monkeypatch.setenv("AUDIO__STREAM_QUALITY", "1")
        monkeypatch.setenv("AUDIO__COMPAT_MODE", "false")
        monkeypatch.setenv("PLAYBACK__IDLE_DISCONNECT_SECONDS", "60")
        monkeypatch.setenv("AUDIT__LOG_CHANNEL_NAME", "mod-log")

        settings = Settings()

        assert settings.discord.token.get_secret_value() == "secret"
        assert settings.has_token is True
        assert settings.discord.command_prefix == "?"
        assert settings.audio.stream_quality == 1
        assert settings.audio.compat_mode is False
        assert settings.playback.idle_disconnect_seconds == 60.0
        assert settings.audit.log_channel_name == "mod-log"

    def test_log_level_normalised(self, monkeypatch):
        """Should upper-case valid log levels."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch):
        """Should reject unknown log levels."""
        monkeypatch.setenv("LOG_LEVEL", "verbose")

        with pytest.raises(ValidationError):
            Settings()

    def test_dotenv_file(self, tmp_path):
        """Should read a .env file in the working directory."""
        (tmp_path / ".env").write_text("DISCORD__TOKEN=from-file\nAUDIT__ENABLED=false\n")

        settings = Settings()

        assert settings.discord.token.get_secret_value() == "from-file"
        assert settings.audit.enabled is False

    def test_get_settings_cached(self, monkeypatch):
        """Should cache until the cache is cleared."""
        first = get_settings()
        monkeypatch.setenv("DISCORD__COMMAND_PREFIX", "$")

        assert get_settings() is first

        clear_settings_cache()
        assert get_settings().discord.command_prefix == "$"


class TestSectionModels:
    """Tests for the nested section models."""

    def test_aliases(self):
        """Should accept the alternative field names."""
        assert DiscordSettings(prefix="?").command_prefix == "?"
        assert DiscordSettings(bot_token="t").token.get_secret_value() == "t"
        assert AudioSettings(quality=0).stream_quality == 0
        assert PlaybackSettings(idle_timeout=30).idle_disconnect_seconds == 30
        assert AuditSettings(channel_name="logs").log_channel_name == "logs"

    @pytest.mark.parametrize(
        ("model", "kwargs"),
        [
            (AudioSettings, {"stream_quality": 3}),
            (AudioSettings, {"default_volume": 2.5}),
            (PlaybackSettings, {"idle_disconnect_seconds": 0}),
            (PlaybackSettings, {"connect_timeout_seconds": 120}),
            (DiscordSettings, {"command_prefix": ""}),
            (AuditSettings, {"log_channel_name": ""}),
        ],
    )
    def test_out_of_range_values_rejected(self, model, kwargs):
        """Should validate field bounds."""
        with pytest.raises(ValidationError):
            model(**kwargs)

    def test_sections_are_frozen(self):
        """Should not allow mutation after creation."""
        settings = PlaybackSettings()

        with pytest.raises(ValidationError):
            settings.idle_disconnect_seconds = 1
