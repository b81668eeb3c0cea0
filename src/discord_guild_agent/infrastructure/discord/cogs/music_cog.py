"""Prefix-command music cog delegating to the command router."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_guild_agent.application.commands.router import (
    COMMAND_ALIASES,
    CommandName,
    CommandRequest,
)
from discord_guild_agent.domain.shared.messages import ErrorMessages
from discord_guild_agent.utils.reply import DISCORD_MESSAGE_LIMIT, truncate

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @staticmethod
    def _voice_channel_id(ctx: commands.Context) -> int | None:
        author = ctx.author
        if not isinstance(author, discord.Member):
            return None
        if author.voice is None or author.voice.channel is None:
            return None
        return author.voice.channel.id

    async def _dispatch(self, ctx: commands.Context, command: CommandName, args: str = "") -> None:
        assert ctx.guild is not None
        request = CommandRequest(
            guild_id=ctx.guild.id,
            command=command.value,
            args=args,
            voice_channel_id=self._voice_channel_id(ctx),
        )
        reply = await self.container.command_router.dispatch(request)
        if reply is None:
            return

        try:
            await ctx.reply(truncate(reply.text, DISCORD_MESSAGE_LIMIT), mention_author=False)
        except discord.HTTPException as e:
            logger.warning("Failed to send reply in guild %s: %s", ctx.guild.id, e)

    @commands.command(name=CommandName.PLAY.value, aliases=list(COMMAND_ALIASES[CommandName.PLAY]))
    @commands.guild_only()
    async def play(self, ctx: commands.Context, *, query: str = "") -> None:
        """Queue a track by link or search term and start playing."""
        async with ctx.typing():
            await self._dispatch(ctx, CommandName.PLAY, query)

    @commands.command(name=CommandName.STOP.value, aliases=list(COMMAND_ALIASES[CommandName.STOP]))
    @commands.guild_only()
    async def stop(self, ctx: commands.Context) -> None:
        """Stop playback, clear the queue and leave voice."""
        await self._dispatch(ctx, CommandName.STOP)

    @commands.command(name=CommandName.SKIP.value, aliases=list(COMMAND_ALIASES[CommandName.SKIP]))
    @commands.guild_only()
    async def skip(self, ctx: commands.Context) -> None:
        """Skip the current track."""
        await self._dispatch(ctx, CommandName.SKIP)

    @commands.command(name=CommandName.QUEUE.value, aliases=list(COMMAND_ALIASES[CommandName.QUEUE]))
    @commands.guild_only()
    async def queue(self, ctx: commands.Context) -> None:
        """Show the pending queue."""
        await self._dispatch(ctx, CommandName.QUEUE)

    @commands.command(
        name=CommandName.NOW_PLAYING.value,
        aliases=list(COMMAND_ALIASES[CommandName.NOW_PLAYING]),
    )
    @commands.guild_only()
    async def now_playing(self, ctx: commands.Context) -> None:
        """Show the track that is playing."""
        await self._dispatch(ctx, CommandName.NOW_PLAYING)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
