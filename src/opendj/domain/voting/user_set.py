"""Lock-guarded set of user names used for tallies and subscriptions."""

from __future__ import annotations

import threading
from collections.abc import Iterable


class UserSet:
    """Unique user membership with atomic operations.

    Insertion order is kept so that fan-out and persistence are stable. The
    backing container is never handed out; ``snapshot`` returns a copy.
    """

    def __init__(self, users: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, None] = dict.fromkeys(users)

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def __contains__(self, user: object) -> bool:
        return self.contains(user)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"UserSet({list(self.snapshot())!r})"

    def add(self, user: str) -> bool:
        """Add ``user``; returns False if they were already a member."""
        with self._lock:
            if user in self._users:
                return False
            self._users[user] = None
            return True

    def remove(self, user: str) -> bool:
        """Remove ``user``; returns False if they were not a member."""
        with self._lock:
            if user not in self._users:
                return False
            del self._users[user]
            return True

    def toggle(self, user: str) -> bool:
        """Flip membership and return True if ``user`` is a member afterwards."""
        with self._lock:
            if user in self._users:
                del self._users[user]
                return False
            self._users[user] = None
            return True

    def contains(self, user: str) -> bool:
        with self._lock:
            return user in self._users

    def clear(self) -> int:
        """Empty the set and return how many members it had."""
        with self._lock:
            count = len(self._users)
            self._users.clear()
            return count

    def drain(self) -> tuple[str, ...]:
        """Atomically return all members and empty the set."""
        with self._lock:
            members = tuple(self._users)
            self._users.clear()
            return members

    def snapshot(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._users)

    def replace(self, users: Iterable[str]) -> None:
        with self._lock:
            self._users = dict.fromkeys(users)
