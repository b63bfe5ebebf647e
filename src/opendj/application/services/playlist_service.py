"""Playlist export: render the store and publish it, reusing the last link."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ...domain.music.formatting import format_playlist
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.playlist_publisher import PlaylistPublisher
    from ...domain.music.request_store import RequestStore
    from .playback_service import PlaybackScheduler

logger = logging.getLogger(__name__)


class PlaylistExporter:
    """Publishes the playlist only when the store changed since the last export."""

    def __init__(
        self,
        *,
        store: RequestStore,
        scheduler: PlaybackScheduler,
        publisher: PlaylistPublisher,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._publisher = publisher
        self._lock = asyncio.Lock()
        self._last_url: str | None = None

    @property
    def last_url(self) -> str | None:
        return self._last_url

    async def export(self) -> str:
        """Return a link to the current playlist.

        Raises:
            OSError: publishing failed; the store stays marked as changed.
        """
        async with self._lock:
            entries = await self._store.take_export_snapshot()
            if entries is None and self._last_url is not None:
                return self._last_url
            if entries is None:
                entries = await self._store.snapshot()

            text = format_playlist(entries, self._scheduler.now_playing)
            try:
                url = await self._publisher.publish(text)
            except Exception:
                self._store.mark_dirty()
                raise

            self._last_url = url
            logger.info(LogTemplates.PLAYLIST_PUBLISHED, url)
            return url
