"""Dependency Injection Container

Wires the guild agent's services and adapters together. Components are
created on first access and cached for the life of the container, so every
cog shares one queue manager, one orchestrator and one audit pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.router import CommandRouter
    from ..application.interfaces.media_resolver import MediaResolver
    from ..application.interfaces.notification_sink import NotificationSink
    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.services.audit_service import AuditService
    from ..application.services.idle_reclaim import IdleReclaimScheduler
    from ..application.services.playback_service import PlaybackOrchestrator
    from ..application.services.queue_service import QueueManager
    from ..infrastructure.audio.ffmpeg_player import FFmpegSourceFactory
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Playback state
    _queue_manager: QueueManager | None = None

    # Infrastructure adapters
    _media_resolver: MediaResolver | None = None
    _source_factory: FFmpegSourceFactory | None = None
    _voice_transport: VoiceTransport | None = None
    _notification_sink: NotificationSink | None = None

    # Application services
    _playback_orchestrator: PlaybackOrchestrator | None = None
    _idle_reclaim_scheduler: IdleReclaimScheduler | None = None
    _audit_service: AuditService | None = None

    # Command routing
    _command_router: CommandRouter | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Playback State ===

    @property
    def queue_manager(self) -> QueueManager:
        if self._queue_manager is None:
            from ..application.services.queue_service import QueueManager

            self._queue_manager = QueueManager()
        return self._queue_manager

    # === Infrastructure Adapters ===

    @property
    def media_resolver(self) -> MediaResolver:
        """Get the yt-dlp backed media resolver."""
        if self._media_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._media_resolver = YtDlpResolver(self.settings.audio)
        return self._media_resolver

    @property
    def source_factory(self) -> FFmpegSourceFactory:
        if self._source_factory is None:
            from ..infrastructure.audio.ffmpeg_player import FFmpegSourceFactory

            self._source_factory = FFmpegSourceFactory(self.settings.audio)
        return self._source_factory

    @property
    def voice_transport(self) -> VoiceTransport:
        """Get the Discord voice transport."""
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_adapter import (
                DiscordVoiceTransport,
            )

            self._voice_transport = DiscordVoiceTransport(
                self.bot, self.settings.playback, self.source_factory
            )
        return self._voice_transport

    @property
    def notification_sink(self) -> NotificationSink:
        """Get the log channel sink used by the audit pipeline."""
        if self._notification_sink is None:
            from ..infrastructure.discord.adapters.log_channel_sink import (
                DiscordLogChannelSink,
            )

            self._notification_sink = DiscordLogChannelSink(self.bot, self.settings.audit)
        return self._notification_sink

    # === Application Services ===

    @property
    def playback_orchestrator(self) -> PlaybackOrchestrator:
        """Get the per-guild playback orchestrator."""
        if self._playback_orchestrator is None:
            from ..application.interfaces.media_resolver import StreamOptions
            from ..application.services.playback_service import PlaybackOrchestrator

            audio = self.settings.audio
            self._playback_orchestrator = PlaybackOrchestrator(
                queue_manager=self.queue_manager,
                media_resolver=self.media_resolver,
                voice_transport=self.voice_transport,
                stream_options=StreamOptions(
                    quality=audio.stream_quality, compat_mode=audio.compat_mode
                ),
            )
        return self._playback_orchestrator

    @property
    def idle_reclaim_scheduler(self) -> IdleReclaimScheduler:
        if self._idle_reclaim_scheduler is None:
            from ..application.services.idle_reclaim import IdleReclaimScheduler

            self._idle_reclaim_scheduler = IdleReclaimScheduler(
                playback_orchestrator=self.playback_orchestrator,
                delay_seconds=self.settings.playback.idle_disconnect_seconds,
            )
        return self._idle_reclaim_scheduler

    @property
    def audit_service(self) -> AuditService:
        """Get the audit service."""
        if self._audit_service is None:
            from ..application.services.audit_service import AuditService

            self._audit_service = AuditService(
                sink=self.notification_sink, enabled=self.settings.audit.enabled
            )
        return self._audit_service

    # === Command Routing ===

    @property
    def command_router(self) -> CommandRouter:
        """Get the command router."""
        if self._command_router is None:
            from ..application.commands.router import CommandRouter

            self._command_router = CommandRouter(
                playback_orchestrator=self.playback_orchestrator
            )
        return self._command_router

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Start event subscribers."""
        self.idle_reclaim_scheduler.start()

    async def shutdown(self) -> None:
        """Stop subscribers and release every playback session."""
        if self._idle_reclaim_scheduler is not None:
            try:
                await self._idle_reclaim_scheduler.shutdown()
            except Exception as exc:
                logger.warning("Failed stopping idle reclaim scheduler: %r", exc)

        if self._playback_orchestrator is not None:
            await self._playback_orchestrator.shutdown()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
