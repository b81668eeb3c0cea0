"""Core domain entities for the playback bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from discord_guild_agent.domain.shared.types import DurationSeconds, NonEmptyStr, TrackTitleStr


class Track(BaseModel):
    """Immutable value object representing a queued track.

    ``source_ref`` is the locator handed to the media resolver when the
    track reaches the head of the queue; streams are never resolved ahead
    of time.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    source_ref: NonEmptyStr
    title: TrackTitleStr | None = None
    duration_seconds: DurationSeconds | None = None

    @field_validator("source_ref", mode="before")
    @classmethod
    def _strip_source_ref(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def display_title(self) -> str:
        """Human readable name; falls back to the locator when no title is known."""
        return self.title or self.source_ref
