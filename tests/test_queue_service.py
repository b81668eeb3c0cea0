"""
Tests for the QueueManager state store

- FIFO enqueue/dequeue with 1-based positions
- Clearing and generation bumps
- Session attach/detach rules
- Playback status bookkeeping and idle epochs
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import CHANNEL_ID, GUILD_ID, OTHER_GUILD_ID, join_pending, make_track

from discord_guild_agent.application.services.queue_service import (
    CommunityPlaybackState,
    QueueManager,
)
from discord_guild_agent.domain.music.value_objects import PlaybackState
from discord_guild_agent.domain.shared.exceptions import (
    AlreadyConnectedError,
    InvalidOperationError,
    NoActiveSessionError,
)


def _session(alive: bool = True) -> MagicMock:
    session = MagicMock()
    session.is_alive = alive
    session.session_id = "session-1"
    session.destroy = AsyncMock()
    return session


class TestQueueOrdering:
    """Tests for FIFO queue behaviour."""

    def test_enqueue_returns_one_based_positions(self):
        """Should number queued tracks from 1."""
        manager = QueueManager()

        positions = [manager.enqueue(GUILD_ID, make_track(n)) for n in ("a", "b", "c")]

        assert positions == [1, 2, 3]

    def test_dequeue_is_fifo(self):
        """Should hand out tracks in the order they were enqueued."""
        manager = QueueManager()
        tracks = [make_track(n) for n in ("a", "b")]
        for track in tracks:
            manager.enqueue(GUILD_ID, track)

        assert manager.peek_first(GUILD_ID) == tracks[0]
        assert manager.dequeue_next(GUILD_ID) == tracks[0]
        assert manager.dequeue_next(GUILD_ID) == tracks[1]
        assert manager.dequeue_next(GUILD_ID) is None

    def test_unknown_guild_has_empty_queue(self):
        """Should not create state for read-only lookups."""
        manager = QueueManager()

        assert manager.list_tracks(GUILD_ID) == []
        assert manager.peek_first(GUILD_ID) is None
        assert manager.dequeue_next(GUILD_ID) is None
        assert manager.get(GUILD_ID) is None

    def test_guilds_do_not_share_queues(self):
        """Should partition queues per guild."""
        manager = QueueManager()
        manager.enqueue(GUILD_ID, make_track("a"))

        assert manager.list_tracks(OTHER_GUILD_ID) == []
        assert manager.lock(GUILD_ID) is not manager.lock(OTHER_GUILD_ID)
        assert manager.lock(GUILD_ID) is manager.lock(GUILD_ID)


class TestClear:
    """Tests for clearing a guild."""

    def test_clear_returns_removed_count_and_bumps_generation(self):
        """Should empty the queue and invalidate in-flight work."""
        manager = QueueManager()
        manager.enqueue(GUILD_ID, make_track("a"))
        manager.enqueue(GUILD_ID, make_track("b"))
        before = manager.get(GUILD_ID).generation

        removed = manager.clear(GUILD_ID)

        assert removed == 2
        assert manager.list_tracks(GUILD_ID) == []
        assert manager.get(GUILD_ID).generation == before + 1

    def test_clear_settles_active_playback_idle(self):
        """Should stop active playback without touching the session."""
        manager = QueueManager()
        session = _session()
        manager.attach_session(GUILD_ID, session)
        state = manager.get(GUILD_ID)
        state.transition_to(PlaybackState.CONNECTING)
        manager.mark_playing(GUILD_ID, make_track("a"))

        epoch = state.idle_epoch

        manager.clear(GUILD_ID)

        assert state.status is PlaybackState.IDLE
        assert state.idle_epoch == epoch + 1
        assert state.now_playing is None
        assert state.session is session

    @pytest.mark.asyncio
    async def test_clear_then_play_starts_again(self, orchestrator, queue_manager, voice_transport):
        """Should let the next play start playback after a bare clear."""
        await orchestrator.enqueue_and_start(GUILD_ID, CHANNEL_ID, make_track("a", "A"))
        async with queue_manager.lock(GUILD_ID):
            queue_manager.clear(GUILD_ID)
        voice_transport.latest.finish()
        await join_pending(orchestrator)

        result = await orchestrator.enqueue_and_start(GUILD_ID, CHANNEL_ID, make_track("b", "B"))

        assert result.started is True
        assert orchestrator.now_playing(GUILD_ID).title == "B"

    def test_clear_unknown_guild(self):
        """Should report nothing removed."""
        assert QueueManager().clear(GUILD_ID) == 0


class TestSessions:
    """Tests for session attach and detach."""

    def test_attach_rejects_second_live_session(self):
        """Should raise AlreadyConnectedError while a live session is attached."""
        manager = QueueManager()
        manager.attach_session(GUILD_ID, _session())

        with pytest.raises(AlreadyConnectedError):
            manager.attach_session(GUILD_ID, _session())

    def test_attach_replaces_dead_session(self):
        """Should accept a new session when the stored one is dead."""
        manager = QueueManager()
        manager.attach_session(GUILD_ID, _session(alive=False))
        replacement = _session()

        manager.attach_session(GUILD_ID, replacement)

        assert manager.get(GUILD_ID).session is replacement

    @pytest.mark.asyncio
    async def test_detach_destroys_session(self):
        """Should forget and destroy the stored session."""
        manager = QueueManager()
        session = _session()
        manager.attach_session(GUILD_ID, session)

        assert await manager.detach_and_destroy_session(GUILD_ID) is True
        session.destroy.assert_awaited_once()
        assert manager.get(GUILD_ID).session is None
        assert await manager.detach_and_destroy_session(GUILD_ID) is False


class TestPlaybackStatus:
    """Tests for status bookkeeping."""

    def test_mark_playing_requires_session(self):
        """Should refuse to mark playback without a session."""
        manager = QueueManager()

        with pytest.raises(NoActiveSessionError):
            manager.mark_playing(GUILD_ID, make_track("a"))

    def test_mark_playing_sets_now_playing(self):
        """Should record the streaming track separately from the queue."""
        manager = QueueManager()
        manager.attach_session(GUILD_ID, _session())
        manager.get(GUILD_ID).transition_to(PlaybackState.CONNECTING)
        track = make_track("a")

        manager.mark_playing(GUILD_ID, track)

        snapshot = manager.snapshot(GUILD_ID)
        assert snapshot.status is PlaybackState.PLAYING
        assert snapshot.now_playing == track
        assert snapshot.tracks == ()

    def test_finish_current_returns_finished_track(self):
        """Should forget the current track."""
        manager = QueueManager()
        manager.attach_session(GUILD_ID, _session())
        manager.get(GUILD_ID).transition_to(PlaybackState.CONNECTING)
        track = make_track("a")
        manager.mark_playing(GUILD_ID, track)

        assert manager.finish_current(GUILD_ID) == track
        assert manager.get(GUILD_ID).now_playing is None

    def test_mark_idle_opens_new_epoch(self):
        """Should bump the idle epoch every time the guild settles."""
        manager = QueueManager()

        first = manager.mark_idle(GUILD_ID)
        second = manager.mark_idle(GUILD_ID)

        assert second == first + 1
        assert manager.get(GUILD_ID).status is PlaybackState.IDLE

    def test_invalid_transition_raises(self):
        """Should reject transitions the state machine does not allow."""
        state = CommunityPlaybackState(guild_id=GUILD_ID)

        with pytest.raises(InvalidOperationError):
            state.transition_to(PlaybackState.PLAYING)

    def test_snapshot_of_unknown_guild(self):
        """Should describe an unknown guild as idle with no session."""
        snapshot = QueueManager().snapshot(GUILD_ID)

        assert snapshot.status is PlaybackState.IDLE
        assert snapshot.has_session is False
        assert snapshot.tracks == ()
