"""Queue Manager - the per-guild playback state store."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ...domain.music.entities import Track
from ...domain.music.value_objects import PlaybackState
from ...domain.shared.exceptions import (
    AlreadyConnectedError,
    InvalidOperationError,
    NoActiveSessionError,
)
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from .playback_session import PlaybackSession

logger = logging.getLogger(__name__)


@dataclass
class CommunityPlaybackState:
    """Playback state for one guild.

    ``now_playing`` is tracked separately from ``queue``: a track leaves the
    queue the moment playback of it begins. ``generation`` is bumped on every
    clear so in-flight work started earlier can recognise itself as stale.
    ``idle_epoch`` is bumped every time the guild settles into ``IDLE``.
    """

    guild_id: int
    queue: deque[Track] = field(default_factory=deque)
    session: PlaybackSession | None = None
    now_playing: Track | None = None
    status: PlaybackState = PlaybackState.IDLE
    generation: int = 0
    idle_epoch: int = 0

    @property
    def is_playing(self) -> bool:
        return self.status.is_playing

    @property
    def has_session(self) -> bool:
        return self.session is not None

    def transition_to(self, new_state: PlaybackState) -> None:
        """Transition to a new playback state."""
        if not self.status.can_transition_to(new_state):
            raise InvalidOperationError(
                operation=f"transition to {new_state.value}",
                current_state=self.status.value,
                message=f"Cannot transition from {self.status.value} to {new_state.value}",
            )
        self.status = new_state


@dataclass(frozen=True, slots=True)
class QueueSnapshot:
    guild_id: int
    tracks: tuple[Track, ...]
    now_playing: Track | None
    status: PlaybackState
    has_session: bool


class QueueManager:
    """Owns every guild's queue and session handle.

    Entries are created lazily and live for the life of the process. Callers
    that perform multi-step transitions hold ``lock(guild_id)`` for the
    duration; guilds never share a lock.
    """

    def __init__(self) -> None:
        self._states: dict[int, CommunityPlaybackState] = {}
        self._locks: dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    def lock(self, guild_id: int) -> asyncio.Lock:
        return self._locks[guild_id]

    def get(self, guild_id: int) -> CommunityPlaybackState | None:
        return self._states.get(guild_id)

    def get_or_create(self, guild_id: int) -> CommunityPlaybackState:
        state = self._states.get(guild_id)
        if state is None:
            state = CommunityPlaybackState(guild_id=guild_id)
            self._states[guild_id] = state
        return state

    def guild_ids(self) -> list[int]:
        return list(self._states)

    # === Queue ===

    def enqueue(self, guild_id: int, track: Track) -> int:
        """Append *track* and return its 1-based position in the pending queue."""
        state = self.get_or_create(guild_id)
        state.queue.append(track)
        position = len(state.queue)
        logger.debug(LogTemplates.TRACK_ENQUEUED, track.display_title, position, guild_id)
        return position

    def peek_first(self, guild_id: int) -> Track | None:
        state = self._states.get(guild_id)
        if state is None or not state.queue:
            return None
        return state.queue[0]

    def dequeue_next(self, guild_id: int) -> Track | None:
        state = self._states.get(guild_id)
        if state is None or not state.queue:
            return None
        return state.queue.popleft()

    def list_tracks(self, guild_id: int) -> list[Track]:
        state = self._states.get(guild_id)
        return list(state.queue) if state else []

    def clear(self, guild_id: int) -> int:
        """Empty the queue, forget the current track, and invalidate in-flight work.

        Active playback passes through ``STOPPED`` and settles into ``IDLE``,
        opening a new idle period. The session is left untouched.
        Returns the number of queued tracks removed.
        """
        state = self._states.get(guild_id)
        if state is None:
            return 0

        removed = len(state.queue)
        state.queue.clear()
        state.now_playing = None
        state.generation += 1
        if state.status.is_active:
            state.transition_to(PlaybackState.STOPPED)
            state.transition_to(PlaybackState.IDLE)
            state.idle_epoch += 1
        return removed

    # === Session ===

    def attach_session(self, guild_id: int, session: PlaybackSession) -> None:
        """Store *session* for the guild.

        Raises:
            AlreadyConnectedError: If a live session is already attached.
        """
        state = self.get_or_create(guild_id)
        if state.session is not None and state.session.is_alive:
            raise AlreadyConnectedError(guild_id)

        state.session = session
        logger.info(LogTemplates.SESSION_ATTACHED, session.session_id, guild_id)

    async def detach_and_destroy_session(self, guild_id: int) -> bool:
        """Destroy and forget the guild's session; returns False if there was none."""
        state = self._states.get(guild_id)
        if state is None or state.session is None:
            return False

        session = state.session
        state.session = None
        await session.destroy()
        return True

    # === Playback status ===

    def mark_playing(self, guild_id: int, track: Track) -> None:
        """Record that *track* is now streaming.

        Raises:
            NoActiveSessionError: If the guild has no session to play through.
        """
        state = self.get_or_create(guild_id)
        if state.session is None:
            raise NoActiveSessionError(guild_id, "play")

        state.transition_to(PlaybackState.PLAYING)
        state.now_playing = track

    def finish_current(self, guild_id: int) -> Track | None:
        """Forget the current track after its stream ended."""
        state = self._states.get(guild_id)
        if state is None:
            return None

        finished = state.now_playing
        state.now_playing = None
        return finished

    def mark_idle(self, guild_id: int) -> int:
        """Settle the guild into ``IDLE`` and open a new idle period.

        Returns the new idle epoch.
        """
        state = self.get_or_create(guild_id)
        state.now_playing = None
        if state.status is not PlaybackState.IDLE:
            state.transition_to(PlaybackState.IDLE)
        state.idle_epoch += 1
        return state.idle_epoch

    def snapshot(self, guild_id: int) -> QueueSnapshot:
        state = self._states.get(guild_id)
        if state is None:
            return QueueSnapshot(
                guild_id=guild_id,
                tracks=(),
                now_playing=None,
                status=PlaybackState.IDLE,
                has_session=False,
            )
        return QueueSnapshot(
            guild_id=guild_id,
            tracks=tuple(state.queue),
            now_playing=state.now_playing,
            status=state.status,
            has_session=state.has_session,
        )
