"""Tests for MusicCog prefix commands."""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from discord.ext import commands

from discord_guild_agent.application.commands.router import CommandReply
from discord_guild_agent.infrastructure.discord.cogs.music_cog import MusicCog, setup

GUILD_ID = 111111111
CHANNEL_ID = 333333333


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.command_router.dispatch = AsyncMock(return_value=CommandReply.ok("ok"))
    return container


@pytest.fixture
def cog(mock_container):
    return MusicCog(MagicMock(spec=commands.Bot), mock_container)


def _ctx(in_voice: bool = True) -> MagicMock:
    ctx = MagicMock()
    ctx.guild.id = GUILD_ID
    ctx.author = MagicMock(spec=discord.Member)
    if in_voice:
        ctx.author.voice = MagicMock()
        ctx.author.voice.channel.id = CHANNEL_ID
    else:
        ctx.author.voice = None
    ctx.reply = AsyncMock()
    return ctx


def _request(mock_container):
    return mock_container.command_router.dispatch.call_args.args[0]


class TestCommands:
    """Each command builds a request for the router and relays the reply."""

    @pytest.mark.asyncio
    async def test_play_forwards_query_and_voice_channel(self, cog, mock_container):
        """Should pass the query and the member's voice channel."""
        ctx = _ctx()

        await cog.play.callback(cog, ctx, query="never gonna give you up")

        request = _request(mock_container)
        assert request.guild_id == GUILD_ID
        assert request.command == "play"
        assert request.args == "never gonna give you up"
        assert request.voice_channel_id == CHANNEL_ID
        ctx.reply.assert_awaited_once_with("ok", mention_author=False)

    @pytest.mark.asyncio
    async def test_member_outside_voice(self, cog, mock_container):
        """Should send no voice channel when the member is not in one."""
        await cog.play.callback(cog, _ctx(in_voice=False), query="song")

        assert _request(mock_container).voice_channel_id is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("attr", "command"),
        [("stop", "stop"), ("skip", "skip"), ("queue", "queue"), ("now_playing", "now-playing")],
    )
    async def test_simple_commands(self, cog, mock_container, attr, command):
        """Should dispatch the matching command name."""
        await getattr(cog, attr).callback(cog, _ctx())

        assert _request(mock_container).command == command

    @pytest.mark.asyncio
    async def test_no_reply_sends_nothing(self, cog, mock_container):
        """Should stay silent when the router has nothing to say."""
        mock_container.command_router.dispatch.return_value = None
        ctx = _ctx()

        await cog.stop.callback(cog, ctx)

        ctx.reply.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_long_reply_truncated(self, cog, mock_container):
        """Should keep replies within Discord's message limit."""
        mock_container.command_router.dispatch.return_value = CommandReply.ok("x" * 3000)
        ctx = _ctx()

        await cog.queue.callback(cog, ctx)

        assert len(ctx.reply.call_args.args[0]) == 2000

    @pytest.mark.asyncio
    async def test_reply_failure_logged(self, cog):
        """Should not raise when the reply cannot be sent."""
        ctx = _ctx()
        ctx.reply.side_effect = discord.HTTPException(MagicMock(status=500, reason="err"), "boom")

        await cog.skip.callback(cog, ctx)


class TestRegistration:
    def test_turkish_aliases_registered(self, cog):
        """Should expose the Turkish command aliases."""
        assert "çal" in cog.play.aliases
        assert "durdur" in cog.stop.aliases
        assert "atla" in cog.skip.aliases
        assert "kuyruk" in cog.queue.aliases

    @pytest.mark.asyncio
    async def test_setup_requires_container(self):
        """Should refuse to load without a container on the bot."""
        with pytest.raises(RuntimeError):
            await setup(MagicMock(spec=commands.Bot))

    @pytest.mark.asyncio
    async def test_setup_adds_cog(self, mock_container):
        """Should add the cog to the bot."""
        bot = MagicMock()
        bot.container = mock_container
        bot.add_cog = AsyncMock()

        await setup(bot)

        assert isinstance(bot.add_cog.call_args.args[0], MusicCog)
