"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_guild_agent.application.interfaces.media_resolver import (
    MediaResolver,
    ResolvedStream,
    SearchResult,
    StreamOptions,
)
from discord_guild_agent.application.interfaces.notification_sink import NotificationSink
from discord_guild_agent.application.interfaces.voice_transport import (
    VoiceConnection,
    VoiceTransport,
)

__all__ = [
    "MediaResolver",
    "SearchResult",
    "StreamOptions",
    "ResolvedStream",
    "VoiceTransport",
    "VoiceConnection",
    "NotificationSink",
]
