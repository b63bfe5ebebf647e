"""
Persistence port for the queue and subscriber snapshots.

Implementations are best effort: they log failures instead of raising, and
loads that fail yield empty results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import QueueEntry
    from ...domain.music.request_store import RequestStore


class SnapshotRepository(ABC):
    """Abstract repository for the persisted queue and subscriber list."""

    @abstractmethod
    async def save_queue(self, entries: Sequence[QueueEntry]) -> bool:
        """Replace the stored queue with ``entries``.

        Returns:
            True if the snapshot was written.
        """
        ...

    @abstractmethod
    async def save_store(self, store: RequestStore) -> bool:
        """Copy ``store`` and replace the stored queue with the copy.

        Concurrent calls are serialized and each one copies the store only
        once the previous write finished, so the last write always holds
        the latest content.
        """
        ...

    @abstractmethod
    async def load_queue(self) -> list[QueueEntry]:
        """Load the stored queue in play order (empty on failure)."""
        ...

    @abstractmethod
    async def save_subscribers(self, users: Sequence[str]) -> bool:
        ...

    @abstractmethod
    async def load_subscribers(self) -> list[str]:
        ...
