"""Discord event listeners for lifecycle, bot voice state, and command errors."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_guild_agent.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


def _format_retry(seconds: float) -> str:
    return f"{seconds:.1f}s" if seconds >= 1 else f"{seconds * 1000:.0f}ms"


def describe_command_error(error: commands.CommandError) -> str | None:
    """User-facing reply for an expected command error, or None if it needs logging."""
    match error:
        case commands.NoPrivateMessage():
            return DiscordUIMessages.STATE_SERVER_ONLY
        case commands.CommandOnCooldown(retry_after=retry_after):
            return DiscordUIMessages.ERROR_COMMAND_COOLDOWN.format(time_str=_format_retry(retry_after))
        case commands.MissingPermissions():
            return DiscordUIMessages.ERROR_MISSING_PERMISSIONS
        case commands.BotMissingPermissions(missing_permissions=missing):
            return DiscordUIMessages.ERROR_BOT_MISSING_PERMISSIONS.format(missing=", ".join(missing))
    return None


class EventCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._resumed_logged_once = False
        self._disconnect_checks: set[asyncio.Task[None]] = set()

    async def cog_unload(self) -> None:
        for task in self._disconnect_checks:
            task.cancel()
        self._disconnect_checks.clear()

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_connect(self) -> None:
        logger.info("WebSocket connected")

    @commands.Cog.listener()
    async def on_disconnect(self) -> None:
        logger.warning("WebSocket disconnected")

    @commands.Cog.listener()
    async def on_resumed(self) -> None:
        if not self._resumed_logged_once:
            logger.info("WebSocket session resumed")
            self._resumed_logged_once = True

    @commands.Cog.listener()
    async def on_guild_join(self, guild: discord.Guild) -> None:
        logger.info("Joined guild: %s (%s)", guild.name, guild.id)

    @commands.Cog.listener()
    async def on_guild_remove(self, guild: discord.Guild) -> None:
        logger.info("Left guild: %s (%s)", guild.name, guild.id)
        await self.container.playback_orchestrator.stop(guild.id)

    # ─────────────────────────────────────────────────────────────────
    # Bot Voice State
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        if self.bot.user is None or member.id != self.bot.user.id:
            return

        if before.channel is None or after.channel is not None:
            return

        logger.info(LogTemplates.VOICE_LOST, member.guild.id)
        task = asyncio.create_task(self._check_session_after_grace(member.guild.id))
        self._disconnect_checks.add(task)
        task.add_done_callback(self._disconnect_checks.discard)

    async def _check_session_after_grace(self, guild_id: int) -> None:
        # discord.py reconnects voice on its own; only a connection that stays
        # down past the grace period is treated as lost.
        await asyncio.sleep(self.container.settings.playback.disconnect_grace_seconds)
        try:
            await self.container.playback_orchestrator.handle_voice_disconnect(guild_id)
        except Exception:
            logger.exception("Failed to clean up after voice loss in guild %s", guild_id)

    # ─────────────────────────────────────────────────────────────────
    # Command Error Handler
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        if isinstance(error, commands.CommandNotFound):
            return

        reply = describe_command_error(error)
        if reply is None:
            original = getattr(error, "original", error)
            logger.error(
                "Unhandled command error in '%s'",
                getattr(ctx.command, "qualified_name", "<unknown>"),
                exc_info=original,
            )
            reply = DiscordUIMessages.ERROR_COMMAND_FAILED_SEE_LOGS

        await self._safe_reply(ctx, reply)

    @staticmethod
    async def _safe_reply(ctx: commands.Context, text: str) -> None:
        try:
            await ctx.reply(text, mention_author=False)
        except discord.HTTPException:
            logger.debug("Could not send error reply in channel %s", getattr(ctx.channel, "id", "?"))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(EventCog(bot, container))
