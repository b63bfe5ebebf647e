"""The ordered request store: one FIFO of queue entries, at most one per owner."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from opendj.domain.music.entities import QueueEntry
from opendj.domain.shared.exceptions import (
    EmptyQueueError,
    IndexOutOfRangeError,
    NotEntryOwnerError,
    UserNotQueuedError,
)
from opendj.domain.shared.messages import LogTemplates
from opendj.domain.shared.types import NonNegativeInt

logger = logging.getLogger(__name__)


class PushResult(BaseModel):
    """Where a pushed entry landed and whether it replaced an earlier request."""

    model_config = ConfigDict(frozen=True)

    entry: QueueEntry
    index: NonNegativeInt
    replaced: bool = False
    queue_length: NonNegativeInt = 0


class RequestStore:
    """Ordered collection of queue entries; insertion order is play order.

    Every operation takes the store lock, so read-modify-write sequences such as
    push-with-replace are atomic with respect to each other and to snapshots.
    Pushing for an owner that is already queued replaces that owner's entry in
    place instead of appending a second one.
    """

    def __init__(self, entries: Iterable[QueueEntry] = ()) -> None:
        self._items: list[QueueEntry] = []
        self._lock = asyncio.Lock()
        self._dirty = True
        for entry in entries:
            self._push_locked(entry)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def lock(self) -> asyncio.Lock:
        """The store lock, for callers that must combine a read with other state."""
        return self._lock

    @property
    def dirty(self) -> bool:
        """True when the order or content changed since the last export snapshot."""
        return self._dirty

    def mark_dirty(self) -> None:
        self._dirty = True

    def _index_of(self, owner: str) -> int:
        for index, entry in enumerate(self._items):
            if entry.owner == owner:
                return index
        return -1

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._items):
            raise IndexOutOfRangeError(index, len(self._items))

    def _push_locked(self, entry: QueueEntry) -> PushResult:
        self._dirty = True
        index = self._index_of(entry.owner)
        if index >= 0:
            previous = self._items[index]
            if entry.dedication is None and previous.dedication is not None:
                entry = entry.with_dedication(previous.dedication)
            self._items[index] = entry
            logger.info(LogTemplates.QUEUE_REPLACED, entry.owner, entry.title)
            return PushResult(
                entry=entry, index=index, replaced=True, queue_length=len(self._items)
            )

        self._items.append(entry)
        logger.info(LogTemplates.QUEUE_ADDED, entry.title, entry.owner)
        return PushResult(
            entry=entry,
            index=len(self._items) - 1,
            replaced=False,
            queue_length=len(self._items),
        )

    async def push(self, entry: QueueEntry) -> PushResult:
        """Append ``entry``, or replace the owner's existing entry at its position."""
        async with self._lock:
            return self._push_locked(entry)

    async def pop(self) -> QueueEntry:
        """Remove and return the head entry."""
        async with self._lock:
            if not self._items:
                raise EmptyQueueError("can't pop from empty queue")
            self._dirty = True
            return self._items.pop(0)

    async def peek(self) -> QueueEntry:
        async with self._lock:
            if not self._items:
                raise EmptyQueueError("can't peek into empty queue")
            return self._items[0]

    async def remove_at(self, index: int, *, only_owner: str | None = None) -> QueueEntry:
        """Remove the entry at ``index``.

        With ``only_owner`` the removal only happens if that user owns the
        entry; the ownership check and the removal are one atomic step.
        """
        async with self._lock:
            self._check_index(index)
            if only_owner is not None and self._items[index].owner != only_owner:
                raise NotEntryOwnerError(only_owner, index)
            self._dirty = True
            entry = self._items.pop(index)
            logger.info(LogTemplates.QUEUE_REMOVED, entry.owner, entry.title, index)
            return entry

    async def replace_at(self, index: int, entry: QueueEntry) -> QueueEntry:
        """Overwrite the entry at ``index`` and return the one it replaced."""
        async with self._lock:
            self._check_index(index)
            self._dirty = True
            previous = self._items[index]
            self._items[index] = entry
            return previous

    async def set_dedication(self, owner: str, target: str) -> QueueEntry:
        """Dedicate ``owner``'s queued entry to ``target`` and return the new entry."""
        async with self._lock:
            index = self._index_of(owner)
            if index < 0:
                raise UserNotQueuedError(owner)
            entry = self._items[index].with_dedication(target)
            self._items[index] = entry
            self._dirty = True
            logger.info(LogTemplates.QUEUE_DEDICATED, owner, target)
            return entry

    async def snapshot(self) -> tuple[QueueEntry, ...]:
        """Consistent copy of the ordered entries."""
        async with self._lock:
            return tuple(self._items)

    async def take_export_snapshot(self) -> tuple[QueueEntry, ...] | None:
        """Copy the entries and clear the dirty flag, or None if nothing changed."""
        async with self._lock:
            if not self._dirty:
                return None
            self._dirty = False
            return tuple(self._items)

    async def load(self, entries: Iterable[QueueEntry]) -> int:
        """Replace the whole content, e.g. from a persisted snapshot.

        Duplicate owners in ``entries`` collapse onto the first position.
        """
        async with self._lock:
            self._items = []
            for entry in entries:
                self._push_locked(entry)
            self._dirty = True
            return len(self._items)
