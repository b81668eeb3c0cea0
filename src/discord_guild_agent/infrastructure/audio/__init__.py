"""yt-dlp media resolution and FFmpeg audio sources for voice playback."""

from discord_guild_agent.infrastructure.audio.ffmpeg_player import FFmpegConfig, FFmpegSourceFactory
from discord_guild_agent.infrastructure.audio.ytdlp_resolver import YtDlpResolver, build_format_selector

__all__ = [
    "FFmpegConfig",
    "FFmpegSourceFactory",
    "YtDlpResolver",
    "build_format_selector",
]
