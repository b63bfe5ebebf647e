"""Audio infrastructure - yt-dlp resolver and ffmpeg renderer."""

from opendj.infrastructure.audio.ffmpeg_renderer import (
    FFmpegConfig,
    FFmpegPlaybackHandle,
    FFmpegRenderer,
)
from opendj.infrastructure.audio.ytdlp_resolver import YtDlpMediaInfo, YtDlpResolver

__all__ = [
    "FFmpegConfig",
    "FFmpegPlaybackHandle",
    "FFmpegRenderer",
    "YtDlpMediaInfo",
    "YtDlpResolver",
]
