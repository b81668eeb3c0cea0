"""Port interface for turning member queries into tracks and playable streams."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from discord_guild_agent.domain.music.entities import Track
from discord_guild_agent.domain.music.value_objects import QueryKind, StreamType
from discord_guild_agent.domain.shared.exceptions import NotFoundError
from discord_guild_agent.domain.shared.messages import LogTemplates
from discord_guild_agent.domain.shared.types import (
    DurationSeconds,
    NonEmptyStr,
    PositiveInt,
    StreamQuality,
)

logger = logging.getLogger(__name__)


class SearchResult(BaseModel):
    """Best-effort match for a free-text search term."""

    model_config = ConfigDict(frozen=True)

    locator: NonEmptyStr
    title: str | None = None
    duration_seconds: DurationSeconds | None = None


class StreamOptions(BaseModel):
    """Stream acquisition hints.

    ``quality`` ranges from 0 (smallest) to 2 (best audio). ``compat_mode``
    asks for a stream the voice player can consume through a plain FFmpeg
    transcode.
    """

    model_config = ConfigDict(frozen=True)

    quality: StreamQuality = 2
    compat_mode: bool = True


class ResolvedStream(BaseModel):
    """A playable audio stream for one locator."""

    model_config = ConfigDict(frozen=True)

    url: NonEmptyStr
    stream_type: StreamType = StreamType.ARBITRARY
    title: str | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)


class MediaResolver(ABC):
    """Interface for classifying queries, searching, and opening streams."""

    @abstractmethod
    def classify(self, query: NonEmptyStr) -> QueryKind:
        """Decide whether *query* is already a locator or a search term."""
        ...

    @abstractmethod
    async def search(self, term: NonEmptyStr, limit: PositiveInt = 1) -> list[SearchResult]:
        """Search for *term*; may return an empty list.

        Raises:
            ResolutionFailedError: If the search backend itself failed.
        """
        ...

    @abstractmethod
    async def open_stream(self, locator: NonEmptyStr, options: StreamOptions) -> ResolvedStream:
        """Acquire a playable stream for *locator*.

        Raises:
            ResolutionFailedError: If the locator could not be extracted.
            StreamUnavailableError: If no playable audio stream exists.
        """
        ...

    async def resolve_track(self, query: NonEmptyStr) -> Track:
        """Turn a member query into a queueable track without opening a stream.

        Direct locators bypass search. Search terms take the single best match.

        Raises:
            NotFoundError: If a search returned nothing.
            ResolutionFailedError: If the search backend failed.
        """
        query = query.strip()
        if self.classify(query) is QueryKind.DIRECT:
            return Track(source_ref=query)

        results = await self.search(query, limit=1)
        if not results:
            logger.info(LogTemplates.RESOLVER_NO_RESULTS, query)
            raise NotFoundError(query)

        best = results[0]
        return Track(
            source_ref=best.locator,
            title=best.title or None,
            duration_seconds=best.duration_seconds,
        )
