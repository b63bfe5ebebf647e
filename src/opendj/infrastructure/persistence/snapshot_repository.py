"""SQLite implementation of the snapshot repository."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from opendj.application.interfaces.snapshot_repository import SnapshotRepository
from opendj.domain.music.entities import Media, QueueEntry
from opendj.domain.shared.datetime_utils import from_iso, to_iso
from opendj.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from opendj.domain.music.request_store import RequestStore

    from .database import Database

logger = logging.getLogger(__name__)

# aiosqlite re-raises the sqlite3 exceptions of the underlying driver.
PERSISTENCE_ERRORS = (sqlite3.Error, OSError)


class SQLiteSnapshotRepository(SnapshotRepository):
    """Stores the queue and subscriber list as ordered rows.

    Each save replaces the previous snapshot in one transaction; queue saves
    run one at a time. Failures are logged and reported through the return
    value. A stored row that no longer validates is skipped on load, the
    rest of the queue is kept.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._queue_lock = asyncio.Lock()

    async def save_queue(self, entries: Sequence[QueueEntry]) -> bool:
        async with self._queue_lock:
            return await self._write_queue(entries)

    async def save_store(self, store: RequestStore) -> bool:
        async with self._queue_lock:
            return await self._write_queue(await store.snapshot())

    async def _write_queue(self, entries: Sequence[QueueEntry]) -> bool:
        try:
            async with self._db.transaction() as conn:
                await conn.execute("DELETE FROM queue_entries")
                await conn.executemany(
                    """
                    INSERT INTO queue_entries (
                        position, owner, title, locator, duration_seconds,
                        dedication, requested_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    [self._entry_to_params(entry, position) for position, entry in enumerate(entries)],
                )
        except PERSISTENCE_ERRORS as e:
            logger.error(LogTemplates.QUEUE_SAVE_FAILED, e)
            return False
        return True

    async def load_queue(self) -> list[QueueEntry]:
        try:
            rows = await self._db.fetch_all("SELECT * FROM queue_entries ORDER BY position ASC")
        except PERSISTENCE_ERRORS as e:
            logger.error(LogTemplates.QUEUE_LOAD_FAILED, e)
            return []

        entries = []
        for row in rows:
            try:
                entries.append(self._row_to_entry(row))
            except (ValidationError, ValueError) as e:
                logger.warning(LogTemplates.QUEUE_ROW_SKIPPED, row.get("position"), e)
        logger.info(LogTemplates.QUEUE_RESTORED, len(entries))
        return entries

    async def save_subscribers(self, users: Sequence[str]) -> bool:
        try:
            async with self._db.transaction() as conn:
                await conn.execute("DELETE FROM subscribers")
                await conn.executemany(
                    "INSERT INTO subscribers (position, user_name) VALUES (?, ?)",
                    list(enumerate(dict.fromkeys(users))),
                )
        except PERSISTENCE_ERRORS as e:
            logger.error(LogTemplates.SUBSCRIBERS_SAVE_FAILED, e)
            return False
        return True

    async def load_subscribers(self) -> list[str]:
        try:
            rows = await self._db.fetch_all("SELECT user_name FROM subscribers ORDER BY position ASC")
        except PERSISTENCE_ERRORS as e:
            logger.error(LogTemplates.SUBSCRIBERS_LOAD_FAILED, e)
            return []
        users = [row["user_name"] for row in rows]
        logger.info(LogTemplates.SUBSCRIBERS_RESTORED, len(users))
        return users

    @staticmethod
    def _entry_to_params(entry: QueueEntry, position: int) -> tuple[Any, ...]:
        return (
            position,
            entry.owner,
            entry.media.title,
            entry.media.locator,
            entry.media.duration_seconds,
            entry.dedication,
            to_iso(entry.requested_at),
        )

    @staticmethod
    def _row_to_entry(row: dict[str, Any]) -> QueueEntry:
        media = Media(
            title=row["title"],
            locator=row["locator"],
            duration_seconds=float(row["duration_seconds"]),
        )
        return QueueEntry(
            media=media,
            owner=row["owner"],
            dedication=row["dedication"],
            requested_at=from_iso(row["requested_at"]),
        )
