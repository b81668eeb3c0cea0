"""
FFmpeg Audio Sources

Infrastructure component that turns resolved streams into discord.py audio sources.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import discord

from discord_guild_agent.application.interfaces.media_resolver import ResolvedStream
from discord_guild_agent.config.settings import AudioSettings
from discord_guild_agent.domain.music.value_objects import StreamType
from discord_guild_agent.domain.shared.exceptions import StreamUnavailableError
from discord_guild_agent.domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)


@dataclass
class FFmpegConfig:
    """Configuration for FFmpeg audio processing."""

    # Reconnection settings for streaming
    reconnect: bool = True
    reconnect_streamed: bool = True
    reconnect_delay_max: int = 5

    # Audio processing
    disable_video: bool = True
    fade_in_seconds: float = 0.5

    # Volume (handled by PCMVolumeTransformer)
    default_volume: float = 0.5

    def get_before_options(self, http_headers: dict[str, str] | None = None) -> str:
        """Get FFmpeg before_options string."""
        opts = []
        if self.reconnect:
            opts.append("-reconnect 1")
        if self.reconnect_streamed:
            opts.append("-reconnect_streamed 1")
        if self.reconnect_delay_max:
            opts.append(f"-reconnect_delay_max {self.reconnect_delay_max}")
        if http_headers:
            header_block = "".join(f"{name}: {value}\r\n" for name, value in http_headers.items())
            opts.append(f'-headers "{header_block}"')
        return " ".join(opts)

    def get_options(self) -> str:
        """Get FFmpeg options string."""
        opts = []
        if self.disable_video:
            opts.append("-vn")
        if self.fade_in_seconds > 0:
            opts.append(f'-af "afade=t=in:ss=0:d={self.fade_in_seconds}"')
        return " ".join(opts)


class FFmpegSourceFactory:
    """Builds the audio source a voice client plays for one resolved stream.

    Arbitrary streams are transcoded to PCM and wrapped in a volume
    transformer. Opus streams are passed through without re-encoding.
    """

    def __init__(
        self, settings: AudioSettings | None = None, config: FFmpegConfig | None = None
    ) -> None:
        self._settings = settings or AudioSettings()
        self._config = config or FFmpegConfig(default_volume=self._settings.default_volume)

    @property
    def config(self) -> FFmpegConfig:
        return self._config

    def create(self, stream: ResolvedStream, volume: float | None = None) -> discord.AudioSource:
        """Create an audio source for *stream*.

        Raises:
            StreamUnavailableError: If FFmpeg could not be started.
        """
        extra = self._settings.ffmpeg_options
        before_options = " ".join(
            filter(None, [self._config.get_before_options(stream.http_headers), extra.get("before_options", "")])
        )

        try:
            if stream.stream_type is StreamType.OPUS:
                return discord.FFmpegOpusAudio(
                    stream.url,
                    codec="copy",
                    before_options=before_options,
                    options="-vn",
                )

            options = " ".join(filter(None, [self._config.get_options(), extra.get("options", "")]))
            source = discord.FFmpegPCMAudio(
                stream.url,
                before_options=before_options,
                options=options,
            )
        except discord.ClientException as e:
            logger.error("Could not start FFmpeg: %s", e)
            raise StreamUnavailableError(
                stream.url, ErrorMessages.SOURCE_CREATION_FAILED.format(error=e)
            ) from e

        vol = volume if volume is not None else self._config.default_volume
        return discord.PCMVolumeTransformer(source, volume=vol)
