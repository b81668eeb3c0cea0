"""Port interface for the audit log destination."""

from __future__ import annotations

from abc import ABC, abstractmethod

from discord_guild_agent.domain.shared.types import DiscordSnowflake


class NotificationSink(ABC):

    @abstractmethod
    async def emit(self, guild_id: DiscordSnowflake, title: str, body: str) -> None:
        """Write one entry to the guild's log channel.

        Raises:
            SinkUnavailableError: If the entry could not be delivered.
        """
        ...

    async def prepare(self, guild_id: DiscordSnowflake) -> None:
        """Make the destination ready ahead of the first entry; no-op by default."""
        return None
