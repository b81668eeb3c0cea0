"""MediaResolver implementation using yt-dlp for search and stream extraction."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_guild_agent.application.interfaces.media_resolver import (
    MediaResolver,
    ResolvedStream,
    SearchResult,
    StreamOptions,
)
from discord_guild_agent.config.settings import AudioSettings
from discord_guild_agent.domain.music.value_objects import QueryKind, StreamType
from discord_guild_agent.domain.shared.exceptions import (
    ResolutionFailedError,
    StreamUnavailableError,
)
from discord_guild_agent.domain.shared.messages import ErrorMessages, LogTemplates
from discord_guild_agent.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    LOG_URL_TRUNCATE,
    MAX_TITLE_LENGTH,
    CacheEntry,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from discord_guild_agent.utils.reply import truncate

logger = logging.getLogger(__name__)

URL_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"https?://"),
    re.compile(r"www\."),
]

# Indexed by StreamOptions.quality.
QUALITY_FORMATS: Final[tuple[str, ...]] = (
    "worstaudio/worst",
    "bestaudio[abr<=128]/bestaudio/best",
    "bestaudio/best",
)

# FFmpeg reads progressive HTTP streams directly; HLS/DASH manifests are less reliable.
COMPAT_PROTOCOL_FILTER: Final[str] = "[protocol^=http]"


def build_format_selector(options: StreamOptions) -> str:
    """Translate stream options into a yt-dlp format selector."""
    base = QUALITY_FORMATS[options.quality]
    if not options.compat_mode:
        return base
    preferred = base.split("/", 1)[0]
    return f"{preferred}{COMPAT_PROTOCOL_FILTER}/{base}"


class YtDlpResolver(MediaResolver):

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts()
        self._info_cache: dict[tuple[str, str], CacheEntry] = {}

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def classify(self, query: str) -> QueryKind:
        if any(pattern.search(query) for pattern in URL_PATTERNS):
            return QueryKind.DIRECT
        return QueryKind.SEARCH_TERM

    # ── Search ──────────────────────────────────────────────────────────

    async def search(self, term: str, limit: int | None = None) -> list[SearchResult]:
        limit = limit or self._settings.search_limit
        entries = await asyncio.to_thread(self._search_sync, term, limit)

        results: list[SearchResult] = []
        for info in entries:
            result = self._to_search_result(info)
            if result is not None:
                results.append(result)
        return results

    def _search_sync(self, term: str, limit: int) -> list[YtDlpTrackInfo]:
        search_query = f"ytsearch{limit}:{term}"
        try:
            with YoutubeDL(params=cast(Any, self._get_opts(extract_flat="in_playlist").model_dump())) as ydl:
                data = ydl.extract_info(search_query, download=False)
        except Exception as e:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, term)
            raise ResolutionFailedError(
                term, ErrorMessages.SEARCH_BACKEND_FAILED.format(query=term, error=e)
            ) from e

        if not isinstance(data, dict):
            return []

        entries = data.get("entries") or []
        if not isinstance(entries, list):
            return []

        return [YtDlpTrackInfo.model_validate(dict(e)) for e in entries if isinstance(e, dict)]

    @staticmethod
    def _to_search_result(info: YtDlpTrackInfo) -> SearchResult | None:
        locator = info.locator
        if not locator:
            return None

        return SearchResult(
            locator=locator,
            title=truncate(info.title, MAX_TITLE_LENGTH) if info.title else None,
            duration_seconds=info.bounded_duration,
        )

    # ── Streams ─────────────────────────────────────────────────────────

    async def open_stream(self, locator: str, options: StreamOptions) -> ResolvedStream:
        selector = build_format_selector(options)
        info = await asyncio.to_thread(self._extract_info_sync, locator, selector)

        stream_url = info.stream_url
        if not stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, locator[:LOG_URL_TRUNCATE])
            raise StreamUnavailableError(
                locator, ErrorMessages.NO_STREAM_URL_FOR_LOCATOR.format(locator=locator)
            )

        stream_type = StreamType.ARBITRARY
        if not options.compat_mode and info.is_opus:
            stream_type = StreamType.OPUS

        logger.debug(LogTemplates.YTDLP_STREAM_OPENED, stream_type.value, locator[:LOG_URL_TRUNCATE])
        return ResolvedStream(
            url=stream_url,
            stream_type=stream_type,
            title=truncate(info.title, MAX_TITLE_LENGTH) if info.title else None,
            http_headers=info.http_headers,
        )

    def _extract_info_sync(self, locator: str, selector: str) -> YtDlpTrackInfo:
        key = (locator, selector)
        now = time.time()
        cached = self._info_cache.get(key)
        if cached is not None:
            if cached.is_fresh(now):
                return cached.info
            self._info_cache.pop(key, None)

        try:
            with YoutubeDL(params=cast(Any, self._get_opts(format=selector).model_dump())) as ydl:
                data = ydl.extract_info(locator, download=False)
        except Exception as e:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, locator[:LOG_URL_TRUNCATE])
            raise ResolutionFailedError(
                locator, ErrorMessages.EXTRACTION_FAILED.format(locator=locator, error=e)
            ) from e

        if not isinstance(data, dict):
            raise ResolutionFailedError(
                locator,
                ErrorMessages.EXTRACTION_FAILED.format(locator=locator, error="empty response"),
            )

        info = YtDlpTrackInfo.model_validate(dict(data))
        self._store(key, info, now)
        return info

    def _store(self, key: tuple[str, str], info: YtDlpTrackInfo, now: float) -> None:
        self._info_cache[key] = CacheEntry(info=info, cached_at=now)
        if len(self._info_cache) > CACHE_MAX_SIZE:
            expired = [k for k, entry in self._info_cache.items() if not entry.is_fresh(now)]
            for k in expired:
                self._info_cache.pop(k, None)

