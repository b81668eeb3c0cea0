"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice transport, log channel sink)
- Audio (yt-dlp, FFmpeg)
"""

from discord_guild_agent.infrastructure.discord.adapters.log_channel_sink import DiscordLogChannelSink
from discord_guild_agent.infrastructure.discord.adapters.voice_adapter import DiscordVoiceTransport
from discord_guild_agent.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
    "DiscordLogChannelSink",
]
