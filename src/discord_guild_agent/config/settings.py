"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )


class AudioSettings(BaseModel):
    """Audio lookup and streaming configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    stream_quality: int = Field(
        default=2, ge=0, le=2, validation_alias=AliasChoices("stream_quality", "quality")
    )
    compat_mode: bool = True
    default_volume: float = Field(default=0.5, ge=0.0, le=2.0)
    # Appended to the options FFmpegConfig generates.
    ffmpeg_options: dict[str, str] = Field(default_factory=dict)
    search_limit: int = Field(default=1, ge=1, le=10)


class PlaybackSettings(BaseModel):
    """Voice session lifecycle configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    idle_disconnect_seconds: float = Field(
        default=300.0,
        gt=0,
        validation_alias=AliasChoices("idle_disconnect_seconds", "idle_timeout"),
    )
    connect_timeout_seconds: float = Field(default=10.0, gt=0, le=60)
    disconnect_grace_seconds: float = Field(default=2.0, ge=0, le=30)


class AuditSettings(BaseModel):
    """Audit log channel configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = True
    log_channel_name: str = Field(
        default="server-logs",
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("log_channel_name", "channel_name"),
    )


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX (nested with ``__``)
    - AUDIO__STREAM_QUALITY, AUDIO__COMPAT_MODE, etc.
    - PLAYBACK__IDLE_DISCONNECT_SECONDS, etc.
    - AUDIT__ENABLED, AUDIT__LOG_CHANNEL_NAME
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper

    @property
    def has_token(self) -> bool:
        return bool(self.discord.token.get_secret_value().strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
