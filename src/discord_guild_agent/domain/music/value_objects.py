"""Immutable value objects for the playback bounded context."""

from __future__ import annotations

from enum import Enum


class PlaybackState(Enum):
    """Per-community playback state with enforced transitions.

    State transitions:
    - IDLE -> CONNECTING (play requested, queue being advanced)
    - CONNECTING -> PLAYING (a track started)
    - CONNECTING -> IDLE (queue exhausted before anything played)
    - PLAYING -> PLAYING (current stream ended, next track started)
    - PLAYING -> IDLE (queue exhausted)
    - CONNECTING/PLAYING -> STOPPED (stop command)
    - STOPPED -> IDLE (teardown finished)
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    PLAYING = "playing"
    STOPPED = "stopped"

    def can_transition_to(self, target: PlaybackState) -> bool:
        """Check if transition to target state is valid."""
        valid_transitions = {
            PlaybackState.IDLE: {PlaybackState.CONNECTING},
            PlaybackState.CONNECTING: {
                PlaybackState.PLAYING,
                PlaybackState.IDLE,
                PlaybackState.STOPPED,
            },
            PlaybackState.PLAYING: {
                PlaybackState.PLAYING,
                PlaybackState.IDLE,
                PlaybackState.STOPPED,
            },
            PlaybackState.STOPPED: {PlaybackState.IDLE},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.CONNECTING, PlaybackState.PLAYING}

    @property
    def is_playing(self) -> bool:
        return self == PlaybackState.PLAYING


class QueryKind(Enum):
    """How a member-supplied query should be turned into a track."""

    DIRECT = "direct"  # already a locator, e.g. a video URL
    SEARCH_TERM = "search_term"


class StreamType(Enum):
    """Container/codec family of a resolved audio stream."""

    ARBITRARY = "arbitrary"  # needs a full FFmpeg transcode
    OPUS = "opus"  # can be passed through without re-encoding


class SessionDestroyReason(Enum):
    """Reasons a playback session can be torn down."""

    STOPPED = "stopped"
    IDLE_RECLAIM = "idle_reclaim"
    DISCONNECTED = "disconnected"
    SHUTDOWN = "shutdown"
