"""
Unit Tests for YtDlpResolver

Tests for the yt-dlp based media resolver:
- Locator extraction from free chat text
- Info dict validation
- Resolve (duration, canonical locator, errors)
- Stream URL selection
"""

from unittest.mock import MagicMock, patch

import pytest

from conftest import make_media
from opendj.domain.shared.exceptions import ResolutionError
from opendj.infrastructure.audio.ytdlp_resolver import (
    AudioFormatInfo,
    YtDlpMediaInfo,
    YtDlpOpts,
    YtDlpResolver,
    canonical_locator,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def resolver():
    """Create a YtDlpResolver instance."""
    return YtDlpResolver()


def patched_youtube_dl(info=None, error=None):
    """Patch YoutubeDL so extract_info returns ``info`` or raises ``error``."""
    ydl = MagicMock()
    if error is not None:
        ydl.extract_info.side_effect = error
    else:
        ydl.extract_info.return_value = info
    factory = MagicMock()
    factory.return_value.__enter__.return_value = ydl
    return patch("opendj.infrastructure.audio.ytdlp_resolver.YoutubeDL", factory)


# =============================================================================
# Locator extraction
# =============================================================================


class TestExtractLocator:
    """Tests for finding a link in a chat line."""

    @pytest.mark.parametrize(
        ("text", "video_id"),
        [
            ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
            ("play this youtube.com/watch?v=abc_-123 please", "abc_-123"),
            ("https://youtube.com/watch?list=PL1&v=xyz789&t=30", "xyz789"),
            ("https://youtu.be/dQw4w9WgXcQ?t=10", "dQw4w9WgXcQ"),
        ],
    )
    def test_recognized(self, resolver, text, video_id):
        assert resolver.extract_locator(text) == canonical_locator(video_id)

    @pytest.mark.parametrize("text", ["", "hello", "https://vimeo.com/12345"])
    def test_not_recognized(self, resolver, text):
        assert resolver.extract_locator(text) is None


# =============================================================================
# Models
# =============================================================================


class TestModels:
    """Tests for the yt-dlp data models."""

    def test_info_ignores_extra_fields(self):
        info = YtDlpMediaInfo.model_validate(
            {"id": "abc", "title": "Song", "duration": 61, "view_count": 5}
        )

        assert info.duration == 61.0
        assert info.title == "Song"

    @pytest.mark.parametrize("duration", [None, "n/a", -5])
    def test_bad_duration_becomes_none(self, duration):
        assert YtDlpMediaInfo.model_validate({"duration": duration}).duration is None

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_missing_title(self, title):
        assert YtDlpMediaInfo.model_validate({"title": title}).title == "Unknown Title"

    def test_opts_dump(self):
        opts = YtDlpOpts(format="bestaudio/best", socket_timeout=5)

        dumped = opts.model_dump()

        assert dumped["format"] == "bestaudio/best"
        assert dumped["noplaylist"] is True
        assert dumped["skip_download"] is True


# =============================================================================
# Resolve
# =============================================================================


class TestResolve:
    """Tests for resolve()."""

    @pytest.mark.asyncio
    async def test_resolve_returns_media(self, resolver):
        info = {"id": "abc123", "title": "Song", "duration": 212}

        with patched_youtube_dl(info):
            media = await resolver.resolve("https://youtu.be/abc123")

        assert media.title == "Song"
        assert media.duration_seconds == 212.0
        assert media.locator == "https://www.youtube.com/watch?v=abc123"

    @pytest.mark.asyncio
    async def test_missing_duration_is_an_error(self, resolver):
        with patched_youtube_dl({"id": "live", "title": "Stream"}):
            with pytest.raises(ResolutionError):
                await resolver.resolve(canonical_locator("live"))

    @pytest.mark.asyncio
    async def test_extractor_error_wrapped(self, resolver):
        with patched_youtube_dl(error=RuntimeError("Video unavailable")):
            with pytest.raises(ResolutionError) as exc_info:
                await resolver.resolve(canonical_locator("gone"))

        assert "Video unavailable" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_no_info(self, resolver):
        with patched_youtube_dl(None):
            with pytest.raises(ResolutionError):
                await resolver.resolve(canonical_locator("x"))


# =============================================================================
# Stream URL
# =============================================================================


class TestStreamUrl:
    """Tests for stream_url()."""

    @pytest.mark.asyncio
    async def test_prefers_direct_url(self, resolver):
        with patched_youtube_dl({"url": "https://cdn/direct", "formats": []}):
            assert await resolver.stream_url(make_media()) == "https://cdn/direct"

    @pytest.mark.asyncio
    async def test_falls_back_to_last_audio_format(self, resolver):
        info = {
            "formats": [
                {"url": "https://cdn/a1", "acodec": "opus"},
                {"url": "https://cdn/video", "acodec": "none"},
                {"url": "https://cdn/a2", "acodec": "mp4a"},
            ]
        }

        with patched_youtube_dl(info):
            assert await resolver.stream_url(make_media()) == "https://cdn/a2"

    @pytest.mark.asyncio
    async def test_no_stream(self, resolver):
        with patched_youtube_dl({"formats": [{"url": "https://cdn/v", "acodec": "none"}]}):
            with pytest.raises(ResolutionError):
                await resolver.stream_url(make_media())

    def test_stream_from_formats_skips_missing_urls(self):
        formats = [AudioFormatInfo(acodec="opus"), AudioFormatInfo(url="https://cdn/x")]

        assert YtDlpResolver._stream_from_formats(formats) == "https://cdn/x"
