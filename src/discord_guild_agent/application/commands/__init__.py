"""
Application Commands

The text command router and the request/reply objects it works with.
"""

from discord_guild_agent.application.commands.router import (
    COMMAND_ALIASES,
    CommandName,
    CommandReply,
    CommandRequest,
    CommandRouter,
    parse_command_name,
    render_queue,
)

__all__ = [
    "CommandName",
    "COMMAND_ALIASES",
    "CommandRequest",
    "CommandReply",
    "CommandRouter",
    "parse_command_name",
    "render_queue",
]
