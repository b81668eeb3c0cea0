"""Port interface for Discord voice connections."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

from discord_guild_agent.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from .media_resolver import ResolvedStream

StreamEndCallback = Callable[[Exception | None], None]


class VoiceConnection(ABC):
    """A live voice connection together with its audio player.

    ``play`` invokes *after* exactly once per started stream, possibly from
    a non-event-loop thread.
    """

    @property
    @abstractmethod
    def guild_id(self) -> DiscordSnowflake:
        ...

    @property
    @abstractmethod
    def channel_id(self) -> DiscordSnowflake | None:
        ...

    @abstractmethod
    def play(self, stream: "ResolvedStream", after: StreamEndCallback) -> None:
        """Start streaming audio.

        Raises:
            StreamUnavailableError: If the player could not open the stream.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop the current stream; the pending *after* callback still fires."""
        ...

    @abstractmethod
    def is_playing(self) -> bool:
        ...

    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Disconnect from voice; safe to call more than once."""
        ...


class VoiceTransport(ABC):
    """Interface for joining voice channels."""

    @abstractmethod
    async def join(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> VoiceConnection:
        """Join a voice channel, reusing an existing connection in the guild when possible.

        Raises:
            VoiceJoinError: On timeout, missing permissions, or client errors.
        """
        ...

    @abstractmethod
    def lookup(self, guild_id: DiscordSnowflake) -> VoiceConnection | None:
        """Return the existing connection for a guild, if any."""
        ...
