"""Discord voice transport implementing VoiceTransport on top of discord.py voice clients."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_guild_agent.application.interfaces.voice_transport import (
    StreamEndCallback,
    VoiceConnection,
    VoiceTransport,
)
from discord_guild_agent.config.settings import PlaybackSettings
from discord_guild_agent.domain.shared.exceptions import StreamUnavailableError, VoiceJoinError
from discord_guild_agent.domain.shared.messages import ErrorMessages, LogTemplates
from discord_guild_agent.infrastructure.audio.ffmpeg_player import FFmpegSourceFactory

if TYPE_CHECKING:
    from discord_guild_agent.application.interfaces.media_resolver import ResolvedStream

logger = logging.getLogger(__name__)


class DiscordVoiceConnection(VoiceConnection):
    """Wraps a connected ``discord.VoiceClient``, which is both connection and player."""

    def __init__(self, voice_client: discord.VoiceClient, source_factory: FFmpegSourceFactory) -> None:
        self._vc = voice_client
        self._sources = source_factory
        self._guild_id = voice_client.guild.id

    @property
    def guild_id(self) -> int:
        return self._guild_id

    @property
    def channel_id(self) -> int | None:
        channel = self._vc.channel
        return channel.id if channel else None

    @property
    def voice_client(self) -> discord.VoiceClient:
        return self._vc

    def play(self, stream: ResolvedStream, after: StreamEndCallback) -> None:
        source = self._sources.create(stream)
        try:
            self._vc.play(source, after=after)
        except discord.DiscordException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            source.cleanup()
            raise StreamUnavailableError(
                stream.url, ErrorMessages.VOICE_CLIENT_ERROR.format(error=e)
            ) from e

    def stop(self) -> None:
        if self._vc.is_playing() or self._vc.is_paused():
            self._vc.stop()

    def is_playing(self) -> bool:
        return self._vc.is_playing()

    def is_connected(self) -> bool:
        return self._vc.is_connected()

    async def destroy(self) -> None:
        if not self._vc.is_connected():
            return
        try:
            await self._vc.disconnect(force=True)
            logger.info(LogTemplates.VOICE_DISCONNECTED, self._guild_id)
        except Exception as exc:
            logger.warning(LogTemplates.VOICE_DISCONNECT_FAILED, self._guild_id, exc)


class DiscordVoiceTransport(VoiceTransport):
    def __init__(
        self,
        bot: discord.Client,
        settings: PlaybackSettings | None = None,
        source_factory: FFmpegSourceFactory | None = None,
    ) -> None:
        self._bot = bot
        self._settings = settings or PlaybackSettings()
        self._sources = source_factory or FFmpegSourceFactory()

    def _get_voice_client(self, guild: discord.Guild) -> discord.VoiceClient | None:
        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    def lookup(self, guild_id: int) -> VoiceConnection | None:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            return None
        vc = self._get_voice_client(guild)
        if vc is None or not vc.is_connected():
            return None
        return DiscordVoiceConnection(vc, self._sources)

    async def join(self, guild_id: int, channel_id: int) -> VoiceConnection:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            raise VoiceJoinError(guild_id, channel_id, ErrorMessages.GUILD_NOT_FOUND.format(guild_id=guild_id))

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            raise VoiceJoinError(
                guild_id, channel_id, ErrorMessages.CHANNEL_NOT_VOICE.format(channel_id=channel_id)
            )

        vc = self._get_voice_client(guild)
        if vc is not None and not vc.is_connected():
            try:
                await vc.disconnect(force=True)
            except Exception as exc:
                logger.warning(LogTemplates.VOICE_DISCONNECT_FAILED, guild_id, exc)
            vc = None

        try:
            async with asyncio.timeout(self._settings.connect_timeout_seconds):
                if vc is None:
                    vc = await channel.connect(self_deaf=True)
                    logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
                elif vc.channel is not None and vc.channel.id == channel_id:
                    logger.debug(LogTemplates.VOICE_REUSED, guild_id)
                else:
                    await vc.move_to(channel)
                    logger.info(LogTemplates.VOICE_MOVED, channel.name)
        except TimeoutError as e:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise VoiceJoinError(
                guild_id, channel_id, ErrorMessages.VOICE_CONNECT_TIMEOUT.format(channel_id=channel_id)
            ) from e
        except discord.Forbidden as e:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise VoiceJoinError(
                guild_id, channel_id, ErrorMessages.VOICE_NO_PERMISSION.format(channel_id=channel_id)
            ) from e
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise VoiceJoinError(
                guild_id, channel_id, ErrorMessages.VOICE_CLIENT_ERROR.format(error=e)
            ) from e

        await self._ensure_self_deaf(guild, channel)
        return DiscordVoiceConnection(vc, self._sources)

    async def _ensure_self_deaf(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
    ) -> None:
        """Ensure the bot is self-deafened in the guild's current voice connection."""
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)
