"""
Playback Bounded Context

Domain types for queued tracks and the per-community playback state machine.
"""

from discord_guild_agent.domain.music.entities import Track
from discord_guild_agent.domain.music.value_objects import (
    PlaybackState,
    QueryKind,
    SessionDestroyReason,
    StreamType,
)

__all__ = [
    # Entities
    "Track",
    # Value Objects
    "PlaybackState",
    "QueryKind",
    "StreamType",
    "SessionDestroyReason",
]
