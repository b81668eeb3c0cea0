"""
Tests for IdleReclaimScheduler

Verifies that timers are armed on queue exhaustion, fire after the delay,
and stay harmless once playback has resumed.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import CHANNEL_ID, GUILD_ID, join_pending, make_track

from discord_guild_agent.application.services.idle_reclaim import (
    DEFAULT_IDLE_DISCONNECT_SECONDS,
    IdleReclaimScheduler,
)
from discord_guild_agent.domain.shared.events import QueueExhausted, get_event_bus


class TestIdleReclaimScheduler:
    """Tests for the fire-and-check reclaim timers."""

    def test_default_delay_is_five_minutes(self):
        """Should wait 300 seconds by default."""
        assert DEFAULT_IDLE_DISCONNECT_SECONDS == 300.0

    @pytest.mark.asyncio
    async def test_queue_exhausted_arms_timer(self):
        """Should call reclaim_if_idle with the event's epoch after the delay."""
        playback = MagicMock()
        playback.reclaim_if_idle = AsyncMock(return_value=True)
        scheduler = IdleReclaimScheduler(playback_orchestrator=playback, delay_seconds=0.01)
        scheduler.start()

        await get_event_bus().publish(QueueExhausted(guild_id=GUILD_ID, idle_epoch=4))
        assert scheduler.pending_timers == 1
        await asyncio.sleep(0.05)

        playback.reclaim_if_idle.assert_awaited_once_with(GUILD_ID, 4)
        assert scheduler.pending_timers == 0

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(self):
        """Should arm no timers once stopped."""
        playback = MagicMock()
        playback.reclaim_if_idle = AsyncMock()
        scheduler = IdleReclaimScheduler(playback_orchestrator=playback, delay_seconds=0.01)
        scheduler.start()
        scheduler.stop()

        await get_event_bus().publish(QueueExhausted(guild_id=GUILD_ID, idle_epoch=1))

        assert scheduler.pending_timers == 0

    @pytest.mark.asyncio
    async def test_shutdown_cancels_pending_timers(self):
        """Should cancel timers that have not fired yet."""
        playback = MagicMock()
        playback.reclaim_if_idle = AsyncMock()
        scheduler = IdleReclaimScheduler(playback_orchestrator=playback, delay_seconds=60)
        scheduler.start()
        await get_event_bus().publish(QueueExhausted(guild_id=GUILD_ID, idle_epoch=1))

        await scheduler.shutdown()

        assert scheduler.pending_timers == 0
        playback.reclaim_if_idle.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reclaim_failure_is_logged(self, caplog):
        """Should log and swallow errors raised by the reclaim."""
        playback = MagicMock()
        playback.reclaim_if_idle = AsyncMock(side_effect=RuntimeError("boom"))
        scheduler = IdleReclaimScheduler(playback_orchestrator=playback, delay_seconds=0)
        scheduler.start()

        await get_event_bus().publish(QueueExhausted(guild_id=GUILD_ID, idle_epoch=1))
        await asyncio.sleep(0.01)

        assert "Idle reclaim failed" in caplog.text


class TestIdleReclaimEndToEnd:
    """Tests running the scheduler against a real orchestrator."""

    @pytest.mark.asyncio
    async def test_idle_session_is_released(self, orchestrator, voice_transport):
        """Should leave voice once the queue has sat empty for the delay."""
        scheduler = IdleReclaimScheduler(playback_orchestrator=orchestrator, delay_seconds=0.01)
        scheduler.start()
        await orchestrator.enqueue_and_start(GUILD_ID, CHANNEL_ID, make_track("one"))

        voice_transport.latest.finish()
        await join_pending(orchestrator)
        await asyncio.sleep(0.05)

        assert voice_transport.latest.destroyed is True
        assert orchestrator.snapshot(GUILD_ID).has_session is False

    @pytest.mark.asyncio
    async def test_resumed_playback_survives_old_timer(self, orchestrator, voice_transport):
        """Should not disconnect when playback resumed before the timer fired."""
        scheduler = IdleReclaimScheduler(playback_orchestrator=orchestrator, delay_seconds=0.05)
        scheduler.start()
        await orchestrator.enqueue_and_start(GUILD_ID, CHANNEL_ID, make_track("one"))
        voice_transport.latest.finish()
        await join_pending(orchestrator)

        await orchestrator.enqueue_and_start(GUILD_ID, CHANNEL_ID, make_track("two", "Two"))
        await asyncio.sleep(0.1)

        assert voice_transport.latest.destroyed is False
        assert orchestrator.now_playing(GUILD_ID).title == "Two"
        await scheduler.shutdown()
