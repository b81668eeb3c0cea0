"""Discord cogs - command handlers and gateway listeners."""

from discord_guild_agent.infrastructure.discord.cogs.audit_cog import AuditCog
from discord_guild_agent.infrastructure.discord.cogs.event_cog import EventCog
from discord_guild_agent.infrastructure.discord.cogs.music_cog import MusicCog

__all__ = [
    "MusicCog",
    "AuditCog",
    "EventCog",
]
