"""Plain-text rendering of durations, progress bars and the playlist snapshot."""

from __future__ import annotations

from collections.abc import Sequence

from opendj.domain.music.entities import NowPlaying, QueueEntry
from opendj.domain.shared.messages import ReplyMessages

BAR_BASE = "—"
BAR_MARKER = "⚫"


def format_duration(seconds: float) -> str:
    """Format a span as ``mm:ss``; minutes keep counting past 59."""
    total = max(0, int(round(seconds)))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def duration_bar(width: int, elapsed: float, total: float) -> str:
    """A ``width`` wide bar with a marker at the elapsed fraction of ``total``."""
    if width <= 0:
        return ""
    fraction = elapsed / total if total > 0 else 0.0
    position = int(width * fraction) - 1
    position = min(max(position, 0), width - 1)
    return BAR_BASE * position + BAR_MARKER + BAR_BASE * (width - position - 1)


def format_playlist(entries: Sequence[QueueEntry], now_playing: NowPlaying | None) -> str:
    """Render the now-playing header followed by one line per queued entry.

    Owners are padded to the longest owner name in ``entries``.
    """
    if now_playing is None:
        lines = [ReplyMessages.PLAYLIST_HEADER_IDLE]
    else:
        lines = [
            ReplyMessages.PLAYLIST_HEADER.format(
                title=now_playing.entry.title, owner=now_playing.entry.owner
            )
        ]
    lines.append("")

    width = max((len(entry.owner) for entry in entries), default=0)
    for position, entry in enumerate(entries, start=1):
        lines.append(
            f" {position:>2} | {entry.owner:<{width}} | "
            f"{format_duration(entry.duration_seconds)} | {entry.title}"
        )
    return "\n".join(lines) + "\n"
