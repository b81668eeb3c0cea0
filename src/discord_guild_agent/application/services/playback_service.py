"""Playback Orchestrator - drives each guild's playback state machine."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...domain.music.entities import Track
from ...domain.music.value_objects import PlaybackState, SessionDestroyReason
from ...domain.shared.events import (
    DomainEvent,
    PlaybackStopped,
    QueueExhausted,
    SessionCreated,
    SessionDestroyed,
    TrackEnqueued,
    TrackResolutionFailed,
    TrackStartedPlaying,
    get_event_bus,
)
from ...domain.shared.exceptions import (
    NoActiveSessionError,
    NotFoundError,
    ResolutionFailedError,
    StreamUnavailableError,
)
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake
from ..interfaces.media_resolver import StreamOptions
from .playback_session import PlaybackSession, StreamEnded

if TYPE_CHECKING:
    from ..interfaces.media_resolver import MediaResolver, ResolvedStream
    from ..interfaces.voice_transport import VoiceTransport
    from .queue_service import QueueManager, QueueSnapshot

logger = logging.getLogger(__name__)

_SKIPPABLE_ERRORS = (NotFoundError, ResolutionFailedError, StreamUnavailableError)


@dataclass(frozen=True, slots=True)
class PlayResult:
    track: Track
    position: int
    started: bool


class PlaybackOrchestrator:
    """Sequences playback for every guild.

    All state changes go through the ``QueueManager`` while holding the
    guild's lock. Network-bound work (query resolution, stream acquisition)
    happens outside the lock and is re-validated against the guild's
    generation and session before its result is applied.
    """

    def __init__(
        self,
        *,
        queue_manager: QueueManager,
        media_resolver: MediaResolver,
        voice_transport: VoiceTransport,
        stream_options: StreamOptions | None = None,
    ) -> None:
        self._queue = queue_manager
        self._resolver = media_resolver
        self._transport = voice_transport
        self._stream_options = stream_options or StreamOptions()
        self._tasks: set[asyncio.Task[None]] = set()

    # === Commands ===

    async def play(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake, query: str
    ) -> PlayResult:
        """Resolve *query*, queue it, and start playback if the guild is idle.

        Raises:
            NotFoundError: If a search returned nothing.
            ResolutionFailedError: If the search backend failed.
            VoiceJoinError: If the voice channel could not be joined.
        """
        track = await self._resolver.resolve_track(query)
        return await self.enqueue_and_start(guild_id, channel_id, track)

    async def enqueue_and_start(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake, track: Track
    ) -> PlayResult:
        events: list[DomainEvent] = []
        generation: int | None = None

        async with self._queue.lock(guild_id):
            state = self._queue.get(guild_id)

            if state is not None and state.session is not None and not state.session.is_alive:
                logger.info(LogTemplates.SESSION_DEAD_DROPPED, guild_id)
                await self._teardown_locked(guild_id, SessionDestroyReason.DISCONNECTED)
                events.append(
                    SessionDestroyed(guild_id=guild_id, reason=SessionDestroyReason.DISCONNECTED.value)
                )

            if state is None or state.session is None:
                connection = await self._transport.join(guild_id, channel_id)
                session = PlaybackSession(connection, self._on_stream_ended)
                self._queue.attach_session(guild_id, session)
                events.append(SessionCreated(guild_id=guild_id, channel_id=channel_id))

            position = self._queue.enqueue(guild_id, track)
            events.append(
                TrackEnqueued(
                    guild_id=guild_id,
                    track_title=track.display_title,
                    queue_position=position,
                )
            )

            state = self._queue.get_or_create(guild_id)
            if state.status is PlaybackState.IDLE:
                state.transition_to(PlaybackState.CONNECTING)
                generation = state.generation

        await self._publish_all(events)

        if generation is not None:
            started = await self._advance(guild_id, generation)
            if started is not None and started[0] is track:
                return PlayResult(track=started[1], position=position, started=True)

        return PlayResult(track=track, position=position, started=False)

    async def stop(self, guild_id: DiscordSnowflake) -> int:
        """Stop playback, clear the queue, and release voice; idempotent.

        Returns the number of queued tracks that were discarded.
        """
        async with self._queue.lock(guild_id):
            state = self._queue.get(guild_id)
            if state is None:
                return 0
            had_session = state.session is not None
            cleared = await self._teardown_locked(guild_id, SessionDestroyReason.STOPPED)

        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        events: list[DomainEvent] = [PlaybackStopped(guild_id=guild_id, cleared_tracks=cleared)]
        if had_session:
            events.append(
                SessionDestroyed(guild_id=guild_id, reason=SessionDestroyReason.STOPPED.value)
            )
        await self._publish_all(events)
        return cleared

    async def skip(self, guild_id: DiscordSnowflake) -> Track:
        """Stop the current stream; the stream-end path advances the queue.

        Raises:
            NoActiveSessionError: If nothing is playing.
        """
        async with self._queue.lock(guild_id):
            state = self._queue.get(guild_id)
            if (
                state is None
                or state.session is None
                or not state.is_playing
                or state.now_playing is None
            ):
                raise NoActiveSessionError(guild_id, "skip")

            skipped = state.now_playing
            state.session.stop()

        logger.info(LogTemplates.TRACK_SKIPPED, skipped.display_title, guild_id)
        return skipped

    def now_playing(self, guild_id: DiscordSnowflake) -> Track:
        """Return the streaming track.

        Raises:
            NoActiveSessionError: If nothing is playing.
        """
        state = self._queue.get(guild_id)
        if state is None or not state.is_playing or state.now_playing is None:
            raise NoActiveSessionError(guild_id, "now-playing")
        return state.now_playing

    def list_queue(self, guild_id: DiscordSnowflake) -> list[Track]:
        return self._queue.list_tracks(guild_id)

    def snapshot(self, guild_id: DiscordSnowflake) -> QueueSnapshot:
        return self._queue.snapshot(guild_id)

    # === Reclaim & disconnects ===

    async def reclaim_if_idle(self, guild_id: DiscordSnowflake, idle_epoch: int) -> bool:
        """Release voice if the guild is still in the idle period *idle_epoch*."""
        async with self._queue.lock(guild_id):
            state = self._queue.get(guild_id)
            if (
                state is None
                or state.session is None
                or state.status is not PlaybackState.IDLE
                or state.idle_epoch != idle_epoch
            ):
                logger.debug(LogTemplates.IDLE_RECLAIM_SKIPPED, guild_id, idle_epoch)
                return False
            await self._teardown_locked(guild_id, SessionDestroyReason.IDLE_RECLAIM)

        logger.info(LogTemplates.IDLE_RECLAIMED, guild_id)
        await self._publish(
            SessionDestroyed(guild_id=guild_id, reason=SessionDestroyReason.IDLE_RECLAIM.value)
        )
        return True

    async def handle_voice_disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Tear the guild down if its voice connection dropped underneath it."""
        async with self._queue.lock(guild_id):
            state = self._queue.get(guild_id)
            if state is None or state.session is None or state.session.is_alive:
                return False
            logger.info(LogTemplates.SESSION_DEAD_DROPPED, guild_id)
            await self._teardown_locked(guild_id, SessionDestroyReason.DISCONNECTED)

        await self._publish(
            SessionDestroyed(guild_id=guild_id, reason=SessionDestroyReason.DISCONNECTED.value)
        )
        return True

    async def shutdown(self) -> None:
        """Release every guild's session and cancel outstanding work."""
        for guild_id in self._queue.guild_ids():
            async with self._queue.lock(guild_id):
                state = self._queue.get(guild_id)
                if state is not None and state.session is not None:
                    await self._teardown_locked(guild_id, SessionDestroyReason.SHUTDOWN)

        tasks = [t for t in self._tasks if not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # === State machine ===

    async def _advance(
        self, guild_id: DiscordSnowflake, generation: int
    ) -> tuple[Track, Track] | None:
        """Start the next playable track, skipping any that fail to resolve.

        Terminates because every iteration removes one track from the queue.
        Returns the dequeued track and the track now playing (the same track,
        titled from the stream when it had no title), or None.
        """
        while True:
            events: list[DomainEvent] = []

            async with self._queue.lock(guild_id):
                state = self._queue.get(guild_id)
                if state is None or state.generation != generation:
                    logger.debug(LogTemplates.STALE_ADVANCE_ABORTED, guild_id, generation)
                    return None

                session = state.session
                if session is None or not session.is_alive:
                    logger.info(LogTemplates.SESSION_DEAD_DROPPED, guild_id)
                    await self._teardown_locked(guild_id, SessionDestroyReason.DISCONNECTED)
                    events.append(
                        SessionDestroyed(
                            guild_id=guild_id, reason=SessionDestroyReason.DISCONNECTED.value
                        )
                    )
                    track = None
                else:
                    track = self._queue.dequeue_next(guild_id)
                    if track is None:
                        epoch = self._queue.mark_idle(guild_id)
                        logger.info(LogTemplates.QUEUE_EXHAUSTED, guild_id, epoch)
                        events.append(QueueExhausted(guild_id=guild_id, idle_epoch=epoch))

            if track is None:
                await self._publish_all(events)
                return None

            stream = await self._open_stream(guild_id, track)
            if stream is None:
                continue

            playing = track
            if track.title is None and stream.title:
                playing = track.model_copy(update={"title": stream.title})

            failure: str | None = None
            async with self._queue.lock(guild_id):
                state = self._queue.get(guild_id)
                if state is None or state.generation != generation or state.session is not session:
                    logger.info(LogTemplates.STALE_RESOLUTION_DISCARDED, track.display_title, guild_id)
                    return None

                try:
                    session.play(stream, generation)
                except StreamUnavailableError as e:
                    failure = e.message
                except Exception as e:
                    failure = repr(e)
                    logger.exception(LogTemplates.PLAYER_START_FAILED, track.display_title, guild_id)
                else:
                    self._queue.mark_playing(guild_id, playing)

            if failure is not None:
                logger.info(LogTemplates.TRACK_RESOLUTION_SKIPPED, track.display_title, guild_id, failure)
                await self._publish(
                    TrackResolutionFailed(guild_id=guild_id, source_ref=track.source_ref, reason=failure)
                )
                continue

            logger.info(LogTemplates.TRACK_STARTED, playing.display_title, guild_id)
            await self._publish(
                TrackStartedPlaying(
                    guild_id=guild_id,
                    track_title=playing.display_title,
                    source_ref=playing.source_ref,
                    duration_seconds=playing.duration_seconds,
                )
            )
            return track, playing

    async def _open_stream(self, guild_id: DiscordSnowflake, track: Track) -> ResolvedStream | None:
        try:
            return await self._resolver.open_stream(track.source_ref, self._stream_options)
        except _SKIPPABLE_ERRORS as e:
            reason = e.message
            logger.info(LogTemplates.TRACK_RESOLUTION_SKIPPED, track.display_title, guild_id, reason)
        except Exception as e:
            reason = repr(e)
            logger.exception(LogTemplates.TRACK_RESOLUTION_SKIPPED, track.display_title, guild_id, reason)

        await self._publish(
            TrackResolutionFailed(guild_id=guild_id, source_ref=track.source_ref, reason=reason)
        )
        return None

    def _on_stream_ended(self, event: StreamEnded) -> None:
        # Invoked on the event loop via call_soon_threadsafe.
        task = asyncio.get_running_loop().create_task(self._run_stream_ended(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_stream_ended(self, event: StreamEnded) -> None:
        try:
            await self._handle_stream_ended(event)
        except Exception:
            logger.exception(LogTemplates.COMPLETION_HANDLER_FAILED, event.guild_id)

    async def _handle_stream_ended(self, event: StreamEnded) -> None:
        guild_id = event.guild_id

        async with self._queue.lock(guild_id):
            state = self._queue.get(guild_id)
            if (
                state is None
                or state.generation != event.generation
                or state.session is None
                or state.session.session_id != event.session_id
                or not state.is_playing
                or state.now_playing is None
            ):
                logger.debug(LogTemplates.STALE_COMPLETION_IGNORED, guild_id, event.generation)
                return

            if event.error is not None:
                logger.warning(LogTemplates.STREAM_ENDED_WITH_ERROR, guild_id, event.error)

            finished = self._queue.finish_current(guild_id)
            if finished is not None:
                logger.info(LogTemplates.TRACK_FINISHED, finished.display_title, guild_id)
            generation = state.generation

        await self._advance(guild_id, generation)

    async def _teardown_locked(self, guild_id: DiscordSnowflake, reason: SessionDestroyReason) -> int:
        """Clear, disconnect, and settle the guild into ``IDLE``; caller holds the lock."""
        cleared = self._queue.clear(guild_id)
        await self._queue.detach_and_destroy_session(guild_id)
        self._queue.mark_idle(guild_id)
        logger.info(LogTemplates.SESSION_TORN_DOWN, guild_id, reason.value, cleared)
        return cleared

    # === Events ===

    async def _publish(self, event: DomainEvent) -> None:
        await get_event_bus().publish(event)

    async def _publish_all(self, events: list[DomainEvent]) -> None:
        for event in events:
            await self._publish(event)
