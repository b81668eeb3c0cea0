"""Discord bot wiring the DI container, cogs, and shutdown of playback sessions."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_guild_agent.domain.shared.exceptions import SinkUnavailableError
from discord_guild_agent.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

MUSIC_COG = "discord_guild_agent.infrastructure.discord.cogs.music_cog"
AUDIT_COG = "discord_guild_agent.infrastructure.discord.cogs.audit_cog"
EVENT_COG = "discord_guild_agent.infrastructure.discord.cogs.event_cog"

COGS: tuple[str, ...] = (MUSIC_COG, AUDIT_COG, EVENT_COG)


def _build_intents() -> discord.Intents:
    # members: role diffs and join/leave; message_content: prefix commands and edit audit
    intents = discord.Intents.default()
    intents.guilds = True
    intents.messages = True
    intents.message_content = True
    intents.voice_states = True
    intents.members = True
    return intents


class GuildAgentBot(commands.Bot):
    def __init__(
        self,
        container: Container,
        settings: Settings,
        **kwargs,
    ) -> None:
        kwargs.setdefault("allowed_mentions", discord.AllowedMentions.none())
        super().__init__(
            command_prefix=settings.discord.command_prefix,
            intents=_build_intents(),
            help_command=None,
            **kwargs,
        )

        self.container = container
        self.settings = settings
        self._shutdown_event = asyncio.Event()
        container.set_bot(self)

    @property
    def enabled_cogs(self) -> tuple[str, ...]:
        if self.settings.audit.enabled:
            return COGS
        return tuple(cog for cog in COGS if cog != AUDIT_COG)

    async def setup_hook(self) -> None:
        logger.info(LogTemplates.BOT_SETUP)

        try:
            await self.container.initialize()
            logger.info(LogTemplates.BOT_CONTAINER_INITIALIZED)
        except Exception as e:
            logger.exception(LogTemplates.BOT_CONTAINER_INIT_FAILED, e)
            raise

        await self._load_cogs()
        logger.info(LogTemplates.BOT_SETUP_COMPLETE)

    async def _load_cogs(self) -> None:
        if not self.settings.audit.enabled:
            logger.info(LogTemplates.AUDIT_DISABLED, AUDIT_COG)

        loaded = 0
        failed = 0
        for cog in self.enabled_cogs:
            try:
                await self.load_extension(cog)
                logger.info(LogTemplates.BOT_COG_LOADED, cog)
                loaded += 1
            except Exception as e:
                logger.exception(LogTemplates.BOT_COG_LOAD_FAILED, cog, e)
                failed += 1

        logger.info(LogTemplates.BOT_COGS_LOADED_SUMMARY, loaded, failed)

    async def _prepare_log_channels(self) -> None:
        """Make sure every guild has its log channel before the first audit entry."""
        sink = self.container.notification_sink
        for guild in self.guilds:
            try:
                await sink.prepare(guild.id)
            except SinkUnavailableError as e:
                logger.warning(LogTemplates.AUDIT_CHANNEL_PREPARE_FAILED, guild.id, e)

    async def on_ready(self) -> None:
        logger.info(LogTemplates.BOT_READY, self.user, getattr(self.user, "id", None))
        logger.info(LogTemplates.BOT_CONNECTED_GUILDS, len(self.guilds))

        if self.settings.audit.enabled:
            await self._prepare_log_channels()

        prefix = self.settings.discord.command_prefix
        activity = discord.Activity(type=discord.ActivityType.listening, name=f"{prefix}play")
        await self.change_presence(activity=activity)

    async def close(self) -> None:
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)

        # Sessions are released through the orchestrator first so queue state
        # is cleared alongside the voice connections.
        try:
            await self.container.shutdown()
            logger.info(LogTemplates.BOT_CONTAINER_SHUTDOWN)
        except Exception as e:
            logger.warning(LogTemplates.BOT_CONTAINER_SHUTDOWN_ERROR, e)

        for vc in list(self.voice_clients):
            try:
                await vc.disconnect(force=True)
            except Exception as exc:
                logger.debug(LogTemplates.VOICE_DISCONNECT_FAILED, getattr(vc.guild, "id", "?"), exc)

        await super().close()
        self._shutdown_event.set()
        logger.info(LogTemplates.BOT_SHUTDOWN_COMPLETE)

    async def _close_with_timeout(self, timeout: float) -> None:
        try:
            await asyncio.wait_for(self.close(), timeout=timeout)
        except TimeoutError:
            logger.warning(LogTemplates.BOT_SHUTDOWN_TIMEOUT, timeout)

    async def serve(self, token: str, *, shutdown_timeout: float = 30.0) -> None:
        """Run until closed, closing gracefully on SIGINT or SIGTERM."""
        async with self:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(
                    sig, lambda: asyncio.create_task(self._close_with_timeout(shutdown_timeout))
                )
            await self.start(token)

    def run_with_graceful_shutdown(self, token: str, *, shutdown_timeout: float = 30.0) -> None:
        asyncio.run(self.serve(token, shutdown_timeout=shutdown_timeout))


def create_bot(container: Container, settings: Settings) -> GuildAgentBot:
    return GuildAgentBot(container=container, settings=settings)
