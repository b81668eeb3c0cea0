"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class NotFoundError(DomainError):
    """Raised when a search yields no results."""

    def __init__(self, query: str, message: str | None = None) -> None:
        msg = message or f"No results found for '{query}'"
        super().__init__(msg, code="NOT_FOUND")
        self.query = query


class ResolutionFailedError(DomainError):
    """Raised when the media backend fails to look up or extract a locator."""

    def __init__(self, locator: str, message: str | None = None) -> None:
        msg = message or f"Could not resolve '{locator}'"
        super().__init__(msg, code="RESOLUTION_FAILED")
        self.locator = locator


class StreamUnavailableError(DomainError):
    """Raised when a locator resolves but yields no playable audio stream."""

    def __init__(self, locator: str, message: str | None = None) -> None:
        msg = message or f"No playable stream for '{locator}'"
        super().__init__(msg, code="STREAM_UNAVAILABLE")
        self.locator = locator


class AlreadyConnectedError(DomainError):
    """Raised when attaching a session to a community that already has a live one."""

    def __init__(self, guild_id: int, message: str | None = None) -> None:
        msg = message or f"Guild {guild_id} already has an active session"
        super().__init__(msg, code="ALREADY_CONNECTED")
        self.guild_id = guild_id


class NoActiveSessionError(DomainError):
    """Raised when an operation needs a session or active playback and there is none."""

    def __init__(self, guild_id: int, operation: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' without an active session in guild {guild_id}"
        super().__init__(msg, code="NO_ACTIVE_SESSION")
        self.guild_id = guild_id
        self.operation = operation


class VoiceJoinError(DomainError):
    """Raised when the voice transport cannot join a channel."""

    def __init__(self, guild_id: int, channel_id: int, message: str | None = None) -> None:
        msg = message or f"Could not join voice channel {channel_id} in guild {guild_id}"
        super().__init__(msg, code="VOICE_JOIN_FAILED")
        self.guild_id = guild_id
        self.channel_id = channel_id


class SinkUnavailableError(DomainError):
    """Raised when the audit log destination cannot be located, created, or written."""

    def __init__(self, guild_id: int, message: str | None = None) -> None:
        msg = message or f"Audit log channel unavailable in guild {guild_id}"
        super().__init__(msg, code="SINK_UNAVAILABLE")
        self.guild_id = guild_id


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state
