"""MediaResolver implementation using yt-dlp for YouTube metadata and streams."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Final, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator
from yt_dlp import YoutubeDL

from opendj.application.interfaces.media_resolver import MediaResolver
from opendj.config.settings import ResolverSettings
from opendj.domain.music.entities import Media
from opendj.domain.shared.exceptions import ResolutionError
from opendj.domain.shared.messages import ErrorMessages, LogTemplates
from opendj.domain.shared.types import NonEmptyStr, NonNegativeFloat, PositiveInt

logger = logging.getLogger(__name__)

DEFAULT_RETRIES: Final[int] = 3
MAX_TITLE_LENGTH: Final[int] = 500
WATCH_URL: Final[str] = "https://www.youtube.com/watch?v="

# ── Pydantic models for yt-dlp data ────────────────────────────────────


class AudioFormatInfo(BaseModel):
    """A single format entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None


class YtDlpMediaInfo(BaseModel):
    """The slice of a yt-dlp info dict that a request needs.

    Extra fields from yt-dlp are ignored; before-validators turn garbage into
    None so missing data is reported as a resolution error, not a crash.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = "Unknown Title"
    duration: NonNegativeFloat | None = None
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator("id", "url", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "Unknown Title"
        return v[:MAX_TITLE_LENGTH]

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> float | None:
        if v is None:
            return None
        try:
            val = float(v)
            return val if val >= 0 else None
        except (TypeError, ValueError):
            return None


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = 10
    format: NonEmptyStr | None = None
    skip_download: bool = True


# ── Locator patterns ───────────────────────────────────────────────────

WATCH_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"youtube\.com/watch\?(?:[^\s#]*&)?v=([a-zA-Z0-9_-]+)"
)
SHORT_PATTERN: Final[re.Pattern[str]] = re.compile(r"youtu\.be/([a-zA-Z0-9_-]+)")


def canonical_locator(video_id: str) -> str:
    return WATCH_URL + video_id


class YtDlpResolver(MediaResolver):
    """Resolves YouTube links through yt-dlp, off the event loop."""

    def __init__(self, settings: ResolverSettings | None = None) -> None:
        self._settings = settings or ResolverSettings()
        self._opts = YtDlpOpts(
            format=self._settings.ytdlp_format,
            socket_timeout=self._settings.socket_timeout,
        )

    def extract_locator(self, text: str) -> str | None:
        for pattern in (WATCH_PATTERN, SHORT_PATTERN):
            match = pattern.search(text)
            if match:
                return canonical_locator(match.group(1))
        return None

    def _extract_info_sync(self, locator: str) -> YtDlpMediaInfo:
        with YoutubeDL(params=cast(Any, self._opts.model_dump())) as ydl:
            data = ydl.extract_info(locator, download=False)
        if not isinstance(data, dict):
            raise ResolutionError(locator, ErrorMessages.RESOLVER_NO_INFO)
        return YtDlpMediaInfo.model_validate(dict(data))

    async def _extract_info(self, locator: str) -> YtDlpMediaInfo:
        try:
            return await asyncio.to_thread(self._extract_info_sync, locator)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(locator, str(e)) from e

    async def resolve(self, locator: str) -> Media:
        logger.debug(LogTemplates.RESOLVING, locator)
        info = await self._extract_info(locator)
        if info.duration is None:
            raise ResolutionError(locator, ErrorMessages.RESOLVER_NO_DURATION)

        locator = canonical_locator(info.id) if info.id else locator
        media = Media(title=info.title, locator=locator, duration_seconds=float(info.duration))
        logger.info(LogTemplates.RESOLVED, locator, media.title, media.duration_seconds)
        return media

    async def stream_url(self, media: Media) -> str:
        info = await self._extract_info(media.locator)
        url = info.url or self._stream_from_formats(info.formats)
        if not url:
            raise ResolutionError(media.locator, ErrorMessages.RESOLVER_NO_STREAM)
        return url

    @staticmethod
    def _stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        audio_formats = [f for f in formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None
