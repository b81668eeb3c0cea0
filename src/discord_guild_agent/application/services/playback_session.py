"""Playback session: one voice connection plus its audio player for a guild."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import uuid4

from ...domain.shared.exceptions import NoActiveSessionError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.media_resolver import ResolvedStream
    from ..interfaces.voice_transport import VoiceConnection

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreamEnded:
    """Emitted once for every stream a session started.

    ``generation`` is the community's generation at the time the stream was
    started; consumers compare it against the live value to drop stale ends.
    """

    guild_id: int
    session_id: str
    generation: int
    error: Exception | None = None


StreamEndedHandler = Callable[[StreamEnded], None]


class PlaybackSession:
    """Binds a voice connection and its player; both live and die together.

    Every stream end is delivered to the single handler supplied at
    construction, on the event loop that created the session.
    """

    def __init__(
        self,
        connection: VoiceConnection,
        on_stream_ended: StreamEndedHandler,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._connection = connection
        self._on_stream_ended = on_stream_ended
        self._loop = loop or asyncio.get_running_loop()
        self._destroyed = False
        self.session_id = uuid4().hex

    @property
    def guild_id(self) -> int:
        return self._connection.guild_id

    @property
    def channel_id(self) -> int | None:
        return self._connection.channel_id

    @property
    def connection(self) -> VoiceConnection:
        return self._connection

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def is_alive(self) -> bool:
        return not self._destroyed and self._connection.is_connected()

    def play(self, stream: ResolvedStream, generation: int) -> None:
        """Start *stream*, tagging its eventual end with *generation*.

        Raises:
            NoActiveSessionError: If the session was already destroyed.
            StreamUnavailableError: If the player could not open the stream.
        """
        if self._destroyed:
            raise NoActiveSessionError(self.guild_id, "play")

        guild_id = self.guild_id
        session_id = self.session_id

        def after_callback(error: Exception | None = None) -> None:
            # Runs on the audio player thread.
            event = StreamEnded(
                guild_id=guild_id,
                session_id=session_id,
                generation=generation,
                error=error,
            )
            try:
                self._loop.call_soon_threadsafe(self._on_stream_ended, event)
            except RuntimeError:
                logger.debug(LogTemplates.STREAM_END_LOOP_CLOSED, guild_id)

        self._connection.play(stream, after_callback)

    def stop(self) -> None:
        """Stop the current stream; its end is still reported to the handler."""
        if self._destroyed:
            return
        if self._connection.is_playing():
            self._connection.stop()

    async def destroy(self) -> None:
        """Stop playback and disconnect; idempotent."""
        if self._destroyed:
            return
        self._destroyed = True

        if self._connection.is_playing():
            self._connection.stop()
        await self._connection.destroy()
        logger.info(LogTemplates.SESSION_DESTROYED, self.session_id, self.guild_id)
