"""
Command Dispatcher

Maps parsed chat commands onto the store, the vote tallies and the scheduler,
and turns the outcome into reply lines for the requester.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ...domain.music.entities import QueueEntry
from ...domain.music.formatting import duration_bar, format_duration
from ...domain.music.services import QueueAccountant
from ...domain.music.value_objects import SkipReason
from ...domain.shared.datetime_utils import monotonic
from ...domain.shared.exceptions import (
    EmptyQueueError,
    IndexOutOfRangeError,
    NotEntryOwnerError,
    ResolutionError,
    UserNotQueuedError,
)
from ...domain.shared.messages import LogTemplates, ReplyMessages
from .chat_command import ChatCommand, CommandType

if TYPE_CHECKING:
    from ...config.settings import PlaybackSettings
    from ...domain.music.request_store import RequestStore
    from ...domain.voting.user_set import UserSet
    from ..interfaces.media_resolver import MediaResolver
    from ..interfaces.snapshot_repository import SnapshotRepository
    from ..services.playback_service import PlaybackScheduler
    from ..services.playlist_service import PlaylistExporter
    from ..services.vote_service import VoteService

logger = logging.getLogger(__name__)

Handler = Callable[[ChatCommand, str], Awaitable[list[str]]]


class CommandDispatcher:
    """Handles one command for one requester and returns the replies to send them.

    Store errors never escape: they become reply text. ``is_moderator`` is the
    only authorization input; moderators may remove any entry and force a skip.
    """

    def __init__(
        self,
        *,
        store: RequestStore,
        scheduler: PlaybackScheduler,
        votes: VoteService,
        exporter: PlaylistExporter,
        resolver: MediaResolver,
        subscribers: UserSet,
        settings: PlaybackSettings,
        is_moderator: Callable[[str], bool],
        snapshot_repository: SnapshotRepository | None = None,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._votes = votes
        self._exporter = exporter
        self._resolver = resolver
        self._subscribers = subscribers
        self._settings = settings
        self._is_moderator = is_moderator
        self._snapshots = snapshot_repository
        self._clock = clock

        self._handlers: dict[CommandType, Handler] = {
            CommandType.PLAYING: self._playing,
            CommandType.NEXT: self._next,
            CommandType.QUEUE: self._queue,
            CommandType.PLAYLIST: self._playlist,
            CommandType.SUBSCRIBE_TOGGLE: self._subscribe_toggle,
            CommandType.LIKE: self._like,
            CommandType.DEDICATE: self._dedicate,
            CommandType.REMOVE: self._remove,
            CommandType.SKIP: self._skip,
            CommandType.FORCE_SKIP: self._force_skip,
            CommandType.SUBMIT: self._submit,
        }

    async def handle(self, command: ChatCommand, requester: str) -> list[str]:
        return await self._handlers[command.type](command, requester)

    # === Queries ===

    async def _playing(self, command: ChatCommand, requester: str) -> list[str]:
        now_playing = self._scheduler.now_playing
        if now_playing is None:
            return [ReplyMessages.NOTHING_PLAYING]

        entry = now_playing.entry
        elapsed = now_playing.elapsed(self._clock())
        dedication = ""
        if entry.dedication:
            dedication = ReplyMessages.PLAYING_DEDICATION.format(target=entry.dedication)
        return [
            ReplyMessages.PLAYING.format(
                bar=duration_bar(
                    self._settings.progress_bar_width, elapsed, entry.duration_seconds
                ),
                elapsed=format_duration(elapsed),
                total=format_duration(entry.duration_seconds),
                title=entry.title,
                owner=entry.owner,
                dedication=dedication,
                locator=entry.media.locator,
            )
        ]

    async def _next(self, command: ChatCommand, requester: str) -> list[str]:
        try:
            entry = await self._store.peek()
        except EmptyQueueError:
            return [ReplyMessages.NO_SONG_QUEUED]

        dedication = ""
        if entry.dedication:
            dedication = ReplyMessages.UP_NEXT_DEDICATION.format(target=entry.dedication)
        return [
            ReplyMessages.UP_NEXT.format(
                title=entry.title, owner=entry.owner, dedication=dedication
            )
        ]

    async def _queue(self, command: ChatCommand, requester: str) -> list[str]:
        return [await self.position_message(requester)]

    async def position_message(self, user: str) -> str:
        """Queue length plus the user's position and estimated wait."""
        entries = await self._store.snapshot()
        now_playing = self._scheduler.now_playing

        message = ReplyMessages.QUEUE_LENGTH.format(count=len(entries))
        positions = QueueAccountant.positions_of(entries, user)
        if positions:
            waits = QueueAccountant.duration_until(
                entries, user, now_playing, self._clock()
            )
            message += ReplyMessages.QUEUE_POSITION.format(position=positions[0] + 1)
            message += ReplyMessages.QUEUE_WAIT.format(wait=format_duration(waits[0]))
        elif QueueAccountant.is_playing_for(now_playing, user):
            message += ReplyMessages.QUEUE_YOURS_PLAYING
        return message

    async def _playlist(self, command: ChatCommand, requester: str) -> list[str]:
        try:
            url = await self._exporter.export()
        except OSError as e:
            logger.error(LogTemplates.PLAYLIST_UPLOAD_FAILED, e)
            return [ReplyMessages.GENERIC_ERROR]
        return [ReplyMessages.PLAYLIST_LINK.format(url=url)]

    # === Tallies ===

    async def _subscribe_toggle(self, command: ChatCommand, requester: str) -> list[str]:
        subscribed = self._subscribers.toggle(requester)
        if self._snapshots is not None:
            await self._snapshots.save_subscribers(self._subscribers.snapshot())
        return [ReplyMessages.SUBSCRIBED if subscribed else ReplyMessages.UNSUBSCRIBED]

    async def _like(self, command: ChatCommand, requester: str) -> list[str]:
        owner = self._votes.like(requester)
        if owner is None:
            return [ReplyMessages.NOTHING_PLAYING]
        return [ReplyMessages.LIKE_ACK.format(owner=owner)]

    async def _skip(self, command: ChatCommand, requester: str) -> list[str]:
        result = await self._votes.cast_skip_vote(requester)
        return [result.message]

    async def _force_skip(self, command: ChatCommand, requester: str) -> list[str]:
        if not self._is_moderator(requester):
            return [ReplyMessages.NOT_MODERATOR]
        if not self._scheduler.skip(SkipReason.MODERATOR):
            return [ReplyMessages.NOTHING_PLAYING]
        return [ReplyMessages.FORCE_SKIPPED]

    # === Store mutations ===

    async def _dedicate(self, command: ChatCommand, requester: str) -> list[str]:
        target = command.argument
        if not target:
            return [ReplyMessages.DEDICATION_EMPTY]
        try:
            await self._store.set_dedication(requester, target)
        except UserNotQueuedError:
            return [ReplyMessages.NOT_QUEUED]
        except ValidationError:
            return [ReplyMessages.DEDICATION_INVALID]
        await self._persist_queue()
        return [ReplyMessages.DEDICATED.format(target=target)]

    async def _remove(self, command: ChatCommand, requester: str) -> list[str]:
        try:
            position = int(command.argument)
        except ValueError:
            return [ReplyMessages.INVALID_INTEGER]

        only_owner = None if self._is_moderator(requester) else requester
        try:
            await self._store.remove_at(position - 1, only_owner=only_owner)
        except IndexOutOfRangeError:
            return [ReplyMessages.INDEX_OUT_OF_RANGE]
        except NotEntryOwnerError:
            return [ReplyMessages.NOT_ALLOWED_TO_REMOVE]
        await self._persist_queue()
        return [ReplyMessages.REMOVED]

    async def _submit(self, command: ChatCommand, requester: str) -> list[str]:
        locator = self._resolver.extract_locator(command.argument)
        if locator is None:
            return [ReplyMessages.INVALID_URL]

        try:
            media = await self._resolver.resolve(locator)
        except ResolutionError as e:
            logger.warning(LogTemplates.PLAYBACK_RESOLVE_FAILED, locator, e.message)
            return [ReplyMessages.INVALID_URL]

        max_duration = self._settings.max_duration_seconds
        if media.duration_seconds >= max_duration:
            return [ReplyMessages.TOO_LONG.format(minutes=max_duration // 60)]

        cap_reply = await self._check_cap(requester, media.duration_seconds)
        if cap_reply is not None:
            return [cap_reply]

        try:
            entry = QueueEntry(media=media, owner=requester)
        except ValidationError:
            return [ReplyMessages.INVALID_REQUESTER]

        result = await self._store.push(entry)
        self._scheduler.notify_pushed()
        await self._persist_queue()

        position = await self.position_message(requester)
        template = ReplyMessages.REPLACED if result.replaced else ReplyMessages.ADDED
        return [template.format(position=position)]

    async def _check_cap(self, user: str, new_duration: float) -> str | None:
        """Reply text if the request would take ``user`` over their queued-time cap."""
        limit = self._settings.max_queued_seconds_per_user
        if limit is None:
            return None

        entries = await self._store.snapshot()
        queued = QueueAccountant.total_queued_duration(
            entries,
            user,
            self._scheduler.now_playing,
            include_current=self._settings.count_current_in_cap,
            now=self._clock(),
        )
        # A new request replaces the user's queued entry, so that one drops out.
        replaced = sum(e.duration_seconds for e in entries if e.owner == user)
        if queued - replaced + new_duration > limit:
            return ReplyMessages.OVER_CAP.format(
                queued=format_duration(queued), limit=format_duration(limit)
            )
        return None

    async def _persist_queue(self) -> None:
        if self._snapshots is None:
            return
        await self._snapshots.save_store(self._store)
