"""Playlist publishers: a hastebin-compatible paste service with a file host fallback."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiohttp

from opendj.application.interfaces.playlist_publisher import PlaylistPublisher
from opendj.config.settings import PublisherSettings
from opendj.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

UPLOAD_ERRORS = (aiohttp.ClientError, TimeoutError, OSError, ValueError)


class FileHostPublisher(PlaylistPublisher):
    """Writes the playlist to ``fallback_path`` and uploads that file.

    The host takes a multipart ``file`` field and answers with the public
    link as plain text.
    """

    def __init__(self, settings: PublisherSettings | None = None) -> None:
        self._settings = settings or PublisherSettings()
        self._path = Path(self._settings.fallback_path)
        self._timeout = aiohttp.ClientTimeout(total=self._settings.file_host_timeout_seconds)

    @property
    def path(self) -> Path:
        return self._path

    async def _upload(self, content: bytes) -> str:
        form = aiohttp.FormData()
        form.add_field("file", content, filename=self._path.name, content_type="text/plain")
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.post(self._settings.file_host_url, data=form) as response:
                response.raise_for_status()
                body = await response.text()
        url = body.strip()
        if not url.startswith(("http://", "https://")):
            raise OSError(f"file host returned no link: {url[:80]!r}")
        return url

    async def publish(self, text: str) -> str:
        await asyncio.to_thread(self._path.write_text, text, encoding="utf-8")
        content = await asyncio.to_thread(self._path.read_bytes)
        try:
            return await self._upload(content)
        except UPLOAD_ERRORS as e:
            raise OSError(str(e)) from e


class PastePublisher(PlaylistPublisher):
    """Uploads to ``{paste_url}/documents`` and links to the raw paste.

    Uploads that fail or take longer than ``upload_timeout_seconds`` go to
    ``fallback`` instead, when one is configured.
    """

    def __init__(
        self,
        settings: PublisherSettings | None = None,
        fallback: PlaylistPublisher | None = None,
    ) -> None:
        self._settings = settings or PublisherSettings()
        self._fallback = fallback
        self._timeout = aiohttp.ClientTimeout(total=self._settings.upload_timeout_seconds)

    @property
    def base_url(self) -> str:
        return self._settings.paste_url.rstrip("/")

    async def _upload(self, text: str) -> str:
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.post(
                f"{self.base_url}/documents", data=text.encode("utf-8")
            ) as response:
                response.raise_for_status()
                payload = await response.json(content_type=None)
        key = payload.get("key") if isinstance(payload, dict) else None
        if not key:
            raise OSError("paste service returned no key")
        return f"{self.base_url}/raw/{key}"

    async def publish(self, text: str) -> str:
        try:
            return await self._upload(text)
        except UPLOAD_ERRORS as e:
            logger.warning(LogTemplates.PLAYLIST_UPLOAD_FAILED, e)
            if self._fallback is None:
                raise OSError(str(e)) from e
        return await self._fallback.publish(text)
