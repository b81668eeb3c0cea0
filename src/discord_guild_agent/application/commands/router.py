"""
Command Router

Maps a parsed text command, scoped to one guild and the invoking member's
voice channel, onto a single playback operation and renders the reply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ...domain.shared.exceptions import (
    AlreadyConnectedError,
    NoActiveSessionError,
    NotFoundError,
    ResolutionFailedError,
    VoiceJoinError,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...utils.reply import format_duration

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ..services.playback_service import PlaybackOrchestrator

logger = logging.getLogger(__name__)

QUEUE_DISPLAY_LIMIT = 20


class CommandName(Enum):
    PLAY = "play"
    STOP = "stop"
    SKIP = "skip"
    QUEUE = "queue"
    NOW_PLAYING = "now-playing"


COMMAND_ALIASES: dict[CommandName, tuple[str, ...]] = {
    CommandName.PLAY: ("çal",),
    CommandName.STOP: ("durdur",),
    CommandName.SKIP: ("atla",),
    CommandName.QUEUE: ("kuyruk",),
    CommandName.NOW_PLAYING: ("now", "nowplaying", "np", "şuankişarkı"),
}

_LOOKUP: dict[str, CommandName] = {
    name: command
    for command in CommandName
    for name in (command.value, *COMMAND_ALIASES[command])
}


def parse_command_name(raw: str) -> CommandName | None:
    """Return the command for a name or alias, ignoring case."""
    return _LOOKUP.get(raw.strip().lower())


@dataclass(frozen=True)
class CommandRequest:
    """A command issued by a member in a guild."""

    guild_id: int
    command: str
    args: str = ""
    voice_channel_id: int | None = None  # Member's current voice channel


@dataclass(frozen=True)
class CommandReply:
    text: str
    rejected: bool = False

    @classmethod
    def ok(cls, text: str) -> CommandReply:
        return cls(text=text)

    @classmethod
    def reject(cls, text: str) -> CommandReply:
        return cls(text=text, rejected=True)


class CommandRouter:
    """Dispatches commands to the playback orchestrator.

    A failed precondition yields a rejection reply and leaves playback state
    untouched. Unknown commands yield ``None`` so the caller can ignore them.
    """

    def __init__(self, *, playback_orchestrator: PlaybackOrchestrator) -> None:
        self._playback = playback_orchestrator

    async def dispatch(self, request: CommandRequest) -> CommandReply | None:
        command = parse_command_name(request.command)
        if command is None:
            logger.debug(LogTemplates.COMMAND_UNKNOWN, request.command)
            return None

        logger.debug(LogTemplates.COMMAND_DISPATCHED, command.value, request.guild_id)
        match command:
            case CommandName.PLAY:
                reply = await self._play(request)
            case CommandName.STOP:
                reply = await self._stop(request)
            case CommandName.SKIP:
                reply = await self._skip(request)
            case CommandName.QUEUE:
                reply = self._queue(request)
            case CommandName.NOW_PLAYING:
                reply = self._now_playing(request)

        if reply.rejected:
            logger.info(LogTemplates.COMMAND_REJECTED, command.value, request.guild_id, reply.text)
        return reply

    async def _play(self, request: CommandRequest) -> CommandReply:
        if request.voice_channel_id is None:
            return CommandReply.reject(DiscordUIMessages.STATE_MUST_BE_IN_VOICE)

        query = request.args.strip()
        if not query:
            return CommandReply.reject(DiscordUIMessages.ERROR_QUERY_REQUIRED)

        try:
            result = await self._playback.play(request.guild_id, request.voice_channel_id, query)
        except NotFoundError:
            return CommandReply.reject(DiscordUIMessages.ERROR_TRACK_NOT_FOUND.format(query=query))
        except ResolutionFailedError:
            return CommandReply.reject(DiscordUIMessages.ERROR_LOOKUP_FAILED)
        except VoiceJoinError:
            return CommandReply.reject(DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE)
        except AlreadyConnectedError:
            return CommandReply.reject(DiscordUIMessages.ERROR_ALREADY_CONNECTED)

        if result.started:
            return CommandReply.ok(
                DiscordUIMessages.ACTION_NOW_PLAYING.format(title=result.track.display_title)
            )
        return CommandReply.ok(
            DiscordUIMessages.ACTION_QUEUED.format(
                title=result.track.display_title, position=result.position
            )
        )

    async def _stop(self, request: CommandRequest) -> CommandReply:
        await self._playback.stop(request.guild_id)
        return CommandReply.ok(DiscordUIMessages.ACTION_STOPPED)

    async def _skip(self, request: CommandRequest) -> CommandReply:
        try:
            skipped = await self._playback.skip(request.guild_id)
        except NoActiveSessionError:
            return CommandReply.reject(DiscordUIMessages.STATE_NOTHING_TO_SKIP)
        return CommandReply.ok(DiscordUIMessages.ACTION_SKIPPED.format(title=skipped.display_title))

    def _queue(self, request: CommandRequest) -> CommandReply:
        tracks = self._playback.list_queue(request.guild_id)
        if not tracks:
            return CommandReply.ok(DiscordUIMessages.STATE_QUEUE_EMPTY)
        return CommandReply.ok(render_queue(tracks))

    def _now_playing(self, request: CommandRequest) -> CommandReply:
        try:
            track = self._playback.now_playing(request.guild_id)
        except NoActiveSessionError:
            return CommandReply.reject(DiscordUIMessages.STATE_NOTHING_PLAYING)

        if track.duration_seconds is not None:
            return CommandReply.ok(
                DiscordUIMessages.STATE_NOW_PLAYING_WITH_DURATION.format(
                    title=track.display_title,
                    duration=format_duration(track.duration_seconds),
                )
            )
        return CommandReply.ok(DiscordUIMessages.STATE_NOW_PLAYING.format(title=track.display_title))


def render_queue(tracks: list[Track], limit: int = QUEUE_DISPLAY_LIMIT) -> str:
    """Render pending tracks with 1-based positions, capped at *limit* lines."""
    lines = [DiscordUIMessages.STATE_QUEUE_HEADER.format(count=len(tracks))]
    lines.extend(
        DiscordUIMessages.STATE_QUEUE_LINE.format(position=i, title=track.display_title)
        for i, track in enumerate(tracks[:limit], start=1)
    )
    if len(tracks) > limit:
        lines.append(DiscordUIMessages.STATE_QUEUE_MORE.format(count=len(tracks) - limit))
    return "\n".join(lines)
