"""Release voice connections that have sat idle for too long."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ...domain.shared.events import QueueExhausted, get_event_bus
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from .playback_service import PlaybackOrchestrator

logger = logging.getLogger(__name__)

DEFAULT_IDLE_DISCONNECT_SECONDS = 300.0


class IdleReclaimScheduler:
    """Arms a timer each time a guild's queue runs dry.

    Timers are never cancelled when playback resumes. Each one carries the
    idle epoch it was armed for and the orchestrator ignores it unless the
    guild is still in that same idle period when it fires.
    """

    def __init__(
        self,
        *,
        playback_orchestrator: PlaybackOrchestrator,
        delay_seconds: float = DEFAULT_IDLE_DISCONNECT_SECONDS,
    ) -> None:
        self._orchestrator = playback_orchestrator
        self._delay = delay_seconds
        self._bus = get_event_bus()
        self._timers: set[asyncio.Task[None]] = set()
        self._started = False

    @property
    def pending_timers(self) -> int:
        return sum(1 for t in self._timers if not t.done())

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(QueueExhausted, self._on_queue_exhausted)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(QueueExhausted, self._on_queue_exhausted)
        self._started = False

    async def shutdown(self) -> None:
        """Unsubscribe and drop every outstanding timer."""
        self.stop()
        timers = [t for t in self._timers if not t.done()]
        for timer in timers:
            timer.cancel()
        if timers:
            await asyncio.gather(*timers, return_exceptions=True)
        self._timers.clear()

    async def _on_queue_exhausted(self, event: QueueExhausted) -> None:
        logger.info(LogTemplates.IDLE_RECLAIM_SCHEDULED, event.guild_id, self._delay, event.idle_epoch)
        timer = asyncio.create_task(self._fire_after_delay(event.guild_id, event.idle_epoch))
        self._timers.add(timer)
        timer.add_done_callback(self._timers.discard)

    async def _fire_after_delay(self, guild_id: int, idle_epoch: int) -> None:
        await asyncio.sleep(self._delay)
        try:
            await self._orchestrator.reclaim_if_idle(guild_id, idle_epoch)
        except Exception:
            logger.exception(LogTemplates.IDLE_RECLAIM_FAILED, guild_id)
