"""Notification fan-out for song start and finish events."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from ...domain.music.events import SongFinished, SongStarted
from ...domain.shared.messages import LogTemplates, ReplyMessages

if TYPE_CHECKING:
    from ...domain.music.entities import QueueEntry
    from ...domain.shared.events import EventBus
    from ...domain.voting.user_set import UserSet
    from ..interfaces.message_sink import MessageSink

logger = logging.getLogger(__name__)


class NotificationService:
    """Subscribes to playback events and sends private messages through the sink.

    Liked entries that reach ``backup_min_likes`` are remembered in a bounded
    rotation, newest last.
    """

    def __init__(
        self,
        *,
        event_bus: EventBus,
        sink: MessageSink,
        subscribers: UserSet,
        likes: UserSet,
        backup_min_likes: int = 3,
        backup_rotation_size: int = 50,
    ) -> None:
        self._bus = event_bus
        self._sink = sink
        self._subscribers = subscribers
        self._likes = likes
        self._backup_min_likes = backup_min_likes
        self._backup: deque[QueueEntry] = deque(maxlen=backup_rotation_size)
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(SongStarted, self._on_song_started)
        self._bus.subscribe(SongFinished, self._on_song_finished)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(SongStarted, self._on_song_started)
        self._bus.unsubscribe(SongFinished, self._on_song_finished)
        self._started = False

    @property
    def backup_rotation(self) -> tuple[QueueEntry, ...]:
        return tuple(self._backup)

    async def _on_song_started(self, event: SongStarted) -> None:
        entry = event.entry
        self._likes.clear()

        await self._sink.enqueue(entry.owner, ReplyMessages.PLAYING_YOUR_SONG)

        dedication = ""
        if entry.dedication:
            dedication = ReplyMessages.NOTICE_DEDICATION.format(target=entry.dedication)
        notice = ReplyMessages.NOW_PLAYING_NOTICE.format(
            owner=entry.owner, title=entry.title, dedication=dedication
        )
        for user in self._subscribers.snapshot():
            await self._sink.enqueue(user, notice)

        if entry.dedication:
            await self._sink.enqueue(
                entry.dedication, ReplyMessages.DEDICATED_TO_YOU.format(owner=entry.owner)
            )

    async def _on_song_finished(self, event: SongFinished) -> None:
        likers = self._likes.drain()
        if not likers:
            return

        count = len(likers)
        people = "person" if count == 1 else "people"
        await self._sink.enqueue(
            event.entry.owner,
            ReplyMessages.LIKED_YOUR_SONG.format(count=count, people=people),
        )

        if count >= self._backup_min_likes and self._backup.maxlen:
            self._backup.append(event.entry)
            logger.debug(LogTemplates.BACKUP_REMEMBERED, event.entry.title, count)
