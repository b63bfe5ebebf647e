"""Date/time helpers.

- Wall-clock timestamps are timezone-aware UTC datetimes (events, persistence).
- Play progress is measured with the monotonic clock so that wall-clock jumps
  never produce negative elapsed times.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime


def utcnow() -> datetime:
    """Timezone-aware ``datetime`` in UTC."""
    return datetime.now(UTC)


def monotonic() -> float:
    """Seconds from an arbitrary fixed point; only differences are meaningful."""
    return time.monotonic()


def to_iso(dt: datetime) -> str:
    """RFC3339/ISO8601 with explicit offset (+00:00)."""
    return dt.astimezone(UTC).isoformat()


def from_iso(value: str) -> datetime:
    # Accepts: '...+00:00' or '...Z'
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
