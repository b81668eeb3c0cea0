"""NotificationSink that writes audit entries to a guild text channel."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

import discord

from discord_guild_agent.application.interfaces.notification_sink import NotificationSink
from discord_guild_agent.config.settings import AuditSettings
from discord_guild_agent.domain.shared.exceptions import SinkUnavailableError
from discord_guild_agent.domain.shared.messages import AuditMessages, ErrorMessages, LogTemplates
from discord_guild_agent.utils.reply import DISCORD_EMBED_DESCRIPTION_LIMIT, truncate

logger = logging.getLogger(__name__)

EMBED_TITLE_LIMIT = 256


class DiscordLogChannelSink(NotificationSink):
    """Finds (or creates) the guild's log channel and posts each entry as an embed."""

    def __init__(self, bot: discord.Client, settings: AuditSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AuditSettings()
        # Serialises lookup-or-create so bursts of events don't create duplicate channels.
        self._locks: dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def channel_name(self) -> str:
        return self._settings.log_channel_name

    async def get_or_create_channel(self, guild: discord.Guild) -> discord.TextChannel:
        async with self._locks[guild.id]:
            existing = discord.utils.get(guild.text_channels, name=self.channel_name)
            if existing is not None:
                return existing

            try:
                channel = await guild.create_text_channel(
                    self.channel_name, reason=AuditMessages.LOG_CHANNEL_CREATE_REASON
                )
            except discord.HTTPException as e:
                raise SinkUnavailableError(
                    guild.id,
                    ErrorMessages.LOG_CHANNEL_CREATE_FAILED.format(name=self.channel_name, error=e),
                ) from e

            logger.info(LogTemplates.AUDIT_CHANNEL_CREATED, self.channel_name, guild.id)
            return channel

    async def prepare(self, guild_id: int) -> None:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise SinkUnavailableError(guild_id, ErrorMessages.GUILD_NOT_FOUND.format(guild_id=guild_id))
        await self.get_or_create_channel(guild)

    async def emit(self, guild_id: int, title: str, body: str) -> None:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise SinkUnavailableError(guild_id, ErrorMessages.GUILD_NOT_FOUND.format(guild_id=guild_id))

        channel = await self.get_or_create_channel(guild)

        embed = discord.Embed(
            title=truncate(title, EMBED_TITLE_LIMIT),
            description=truncate(body, DISCORD_EMBED_DESCRIPTION_LIMIT),
            color=discord.Color.blurple(),
            timestamp=discord.utils.utcnow(),
        )
        try:
            await channel.send(embed=embed)
        except discord.HTTPException as e:
            raise SinkUnavailableError(
                guild_id,
                ErrorMessages.LOG_CHANNEL_SEND_FAILED.format(name=self.channel_name, error=e),
            ) from e
