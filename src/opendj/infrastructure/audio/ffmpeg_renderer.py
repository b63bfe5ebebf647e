"""
FFmpeg Renderer

Streams resolved media to the RTMP ingest through an ffmpeg child process.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from opendj.application.interfaces.renderer import PlaybackHandle, Renderer
from opendj.config.settings import RendererSettings
from opendj.domain.music.value_objects import PlaybackOutcome
from opendj.domain.shared.exceptions import PlaybackFailure
from opendj.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from opendj.application.interfaces.media_resolver import MediaResolver
    from opendj.domain.music.entities import Media

logger = logging.getLogger(__name__)


@dataclass
class FFmpegConfig:
    """Arguments for the ffmpeg process that feeds the ingest."""

    # Reconnection settings for streaming input
    reconnect: bool = True
    reconnect_at_eof: bool = True
    reconnect_delay_max: int = 3

    # Read input at native frame rate so the ingest receives real time audio
    realtime: bool = True

    audio_codec: str = "aac"
    output_format: str = "flv"

    def input_options(self) -> list[str]:
        opts: list[str] = []
        if self.reconnect:
            opts += ["-reconnect", "1"]
        if self.reconnect_at_eof:
            opts += ["-reconnect_at_eof", "1"]
        if self.reconnect_delay_max:
            opts += ["-reconnect_delay_max", str(self.reconnect_delay_max)]
        if self.realtime:
            opts.append("-re")
        return opts

    def output_options(self) -> list[str]:
        return ["-codec:a", self.audio_codec, "-f", self.output_format]

    def build_args(self, stream_url: str, output_url: str) -> list[str]:
        return [*self.input_options(), "-i", stream_url, *self.output_options(), output_url]


class FFmpegPlaybackHandle(PlaybackHandle):
    """One running ffmpeg process.

    ``cancel`` terminates the process and kills it if it has not exited
    within ``terminate_timeout`` seconds.
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        *,
        title: str,
        terminate_timeout: float = 5.0,
    ) -> None:
        self._process = process
        self._title = title
        self._terminate_timeout = terminate_timeout
        self._cancelled = False
        self._error: str | None = None

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def pid(self) -> int:
        return self._process.pid

    async def wait(self) -> PlaybackOutcome:
        code = await self._process.wait()
        if self._cancelled:
            return PlaybackOutcome.CANCELLED
        if code != 0:
            self._error = ErrorMessages.RENDERER_EXIT_CODE.format(code=code)
            return PlaybackOutcome.FAILURE
        return PlaybackOutcome.SUCCESS

    async def cancel(self) -> None:
        self._cancelled = True
        if self._process.returncode is not None:
            return

        logger.info(LogTemplates.RENDERER_CANCELLED, self._title)
        try:
            self._process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(self._process.wait(), timeout=self._terminate_timeout)
        except TimeoutError:
            try:
                self._process.kill()
            except ProcessLookupError:
                return
            await self._process.wait()


class FFmpegRenderer(Renderer):
    """Starts one ffmpeg process per entry, after asking the resolver for a stream URL."""

    def __init__(
        self,
        resolver: MediaResolver,
        settings: RendererSettings | None = None,
        config: FFmpegConfig | None = None,
    ) -> None:
        self._resolver = resolver
        self._settings = settings or RendererSettings()
        self._config = config or FFmpegConfig(
            reconnect_delay_max=self._settings.reconnect_delay_max,
            audio_codec=self._settings.audio_codec,
            output_format=self._settings.output_format,
        )

    async def start(self, media: Media) -> FFmpegPlaybackHandle:
        stream_url = await self._resolver.stream_url(media)
        args = self._config.build_args(stream_url, self._settings.output_url)

        logger.info(LogTemplates.RENDERER_STARTING, media.title)
        try:
            process = await asyncio.create_subprocess_exec(
                self._settings.ffmpeg_path,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise PlaybackFailure(ErrorMessages.RENDERER_NOT_STARTED.format(error=e)) from e

        return FFmpegPlaybackHandle(
            process,
            title=media.title,
            terminate_timeout=self._settings.terminate_timeout_seconds,
        )
