"""Typed views over yt-dlp output plus the options handed to YoutubeDL.

yt-dlp returns loosely typed dictionaries; the models below keep only the
fields the resolver needs and turn malformed values into None instead of
failing validation.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_guild_agent.domain.shared.types import (
    NonEmptyStr,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveInt,
)

CACHE_TTL: Final[int] = 1800
CACHE_MAX_SIZE: Final[int] = 200
DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
DEFAULT_HTTP_CHUNK_SIZE: Final[int] = 1024 * 1024
LOG_URL_TRUNCATE: Final[int] = 60
MAX_TITLE_LENGTH: Final[int] = 500
# Anything longer is a live stream or bogus metadata.
MAX_DURATION_SECONDS: Final[int] = 86_400

NO_AUDIO_CODEC: Final[str] = "none"
OPUS_CODEC: Final[str] = "opus"


def _blank_to_none(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return value


class AudioFormatInfo(BaseModel):
    """One entry of the ``formats`` list."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None
    protocol: NonEmptyStr | None = None

    @field_validator("url", "acodec", "protocol", mode="before")
    @classmethod
    def _blank(cls, v: Any) -> str | None:
        return _blank_to_none(v)

    @property
    def carries_audio(self) -> bool:
        return self.url is not None and self.acodec != NO_AUDIO_CODEC


class YtDlpTrackInfo(BaseModel):
    """A single extraction result or flat search entry."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    webpage_url: NonEmptyStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr | None = None
    duration: NonNegativeInt | None = None
    acodec: NonEmptyStr | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator("webpage_url", "url", "title", "acodec", mode="before")
    @classmethod
    def _blank(cls, v: Any) -> str | None:
        return _blank_to_none(v)

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        # Floats such as 212.0 are common; negatives and garbage are dropped.
        try:
            seconds = int(v)
        except (TypeError, ValueError, OverflowError):
            return None
        return seconds if seconds >= 0 else None

    @field_validator("http_headers", mode="before")
    @classmethod
    def _coerce_headers(cls, v: Any) -> dict[str, str]:
        if not isinstance(v, dict):
            return {}
        return {str(k): str(val) for k, val in v.items()}

    @field_validator("formats", mode="before")
    @classmethod
    def _drop_malformed_formats(cls, v: Any) -> list[Any]:
        if not isinstance(v, list):
            return []
        return [f for f in v if isinstance(f, dict)]

    @property
    def locator(self) -> str | None:
        """Canonical page URL, falling back to the entry URL of flat results."""
        return self.webpage_url or self.url

    @property
    def stream_url(self) -> str | None:
        """Direct media URL, else the last audio-bearing format (yt-dlp sorts best last)."""
        if self.url:
            return self.url
        audio = [f for f in self.formats if f.carries_audio]
        return audio[-1].url if audio else None

    @property
    def is_opus(self) -> bool:
        return self.acodec == OPUS_CODEC

    @property
    def bounded_duration(self) -> int | None:
        if self.duration is None or self.duration > MAX_DURATION_SECONDS:
            return None
        return self.duration


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    info: YtDlpTrackInfo
    cached_at: NonNegativeFloat

    def is_fresh(self, now: float, ttl: float = CACHE_TTL) -> bool:
        return now - self.cached_at < ttl


class YtDlpOpts(BaseModel):
    """Parameters for ``YoutubeDL``; dumped with ``model_dump()`` at call time."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = "ytsearch"
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    http_chunk_size: PositiveInt = DEFAULT_HTTP_CHUNK_SIZE
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
