"""
Shared Domain Kernel

Contains exceptions, events and constrained types shared across all bounded contexts.
"""

from discord_guild_agent.domain.shared.exceptions import (
    AlreadyConnectedError,
    DomainError,
    InvalidOperationError,
    NoActiveSessionError,
    NotFoundError,
    ResolutionFailedError,
    SinkUnavailableError,
    StreamUnavailableError,
    VoiceJoinError,
)

__all__ = [
    "DomainError",
    "NotFoundError",
    "ResolutionFailedError",
    "StreamUnavailableError",
    "AlreadyConnectedError",
    "NoActiveSessionError",
    "VoiceJoinError",
    "SinkUnavailableError",
    "InvalidOperationError",
]
