"""
Music Domain Services

Position and wait-time accounting over a request store snapshot.
"""

from __future__ import annotations

from collections.abc import Sequence

from opendj.domain.music.entities import NowPlaying, QueueEntry
from opendj.domain.shared.exceptions import UserNotQueuedError


class QueueAccountant:
    """Derives queue positions and wait estimates for a requester.

    All methods are pure functions of a store snapshot, the current entry and
    a monotonic ``now``; callers take the snapshot under the store lock.
    """

    @staticmethod
    def positions_of(entries: Sequence[QueueEntry], user: str) -> list[int]:
        """Ordered indices of ``user``'s entries in ``entries``.

        Normally zero or one index, since the store replaces instead of
        appending a second entry for the same owner.
        """
        return [index for index, entry in enumerate(entries) if entry.owner == user]

    @staticmethod
    def remaining_current(now_playing: NowPlaying | None, now: float | None = None) -> float:
        if now_playing is None:
            return 0.0
        return now_playing.remaining(now)

    @classmethod
    def duration_until(
        cls,
        entries: Sequence[QueueEntry],
        user: str,
        now_playing: NowPlaying | None = None,
        now: float | None = None,
    ) -> list[float]:
        """Seconds until each of ``user``'s entries starts playing.

        For every position, sums the durations of all entries strictly ahead of
        it and adds what is left of the current entry. An entry's own duration
        never counts toward its own wait.

        Raises:
            UserNotQueuedError: ``user`` has no entry in ``entries``.
        """
        positions = cls.positions_of(entries, user)
        if not positions:
            raise UserNotQueuedError(user)

        current_remaining = cls.remaining_current(now_playing, now)
        waits: list[float] = []
        ahead = 0.0
        cursor = 0
        for position in positions:
            while cursor < position:
                ahead += entries[cursor].duration_seconds
                cursor += 1
            waits.append(ahead + current_remaining)
        return waits

    @staticmethod
    def is_playing_for(now_playing: NowPlaying | None, user: str) -> bool:
        return now_playing is not None and now_playing.entry.owner == user

    @classmethod
    def total_queued_duration(
        cls,
        entries: Sequence[QueueEntry],
        user: str,
        now_playing: NowPlaying | None = None,
        *,
        include_current: bool = False,
        now: float | None = None,
    ) -> float:
        """Total seconds of music ``user`` has waiting.

        With ``include_current`` the remaining time of the user's entry that is
        playing right now also counts.
        """
        total = sum(entry.duration_seconds for entry in entries if entry.owner == user)
        if include_current and cls.is_playing_for(now_playing, user):
            assert now_playing is not None
            total += now_playing.remaining(now)
        return total
