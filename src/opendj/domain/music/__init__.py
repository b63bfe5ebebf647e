"""
Music Bounded Context

Media and queue entries, the request store, wait-time accounting and the
playlist formatter.
"""

from opendj.domain.music.entities import Media, NowPlaying, QueueEntry
from opendj.domain.music.events import SongFinished, SongStarted
from opendj.domain.music.request_store import PushResult, RequestStore
from opendj.domain.music.services import QueueAccountant
from opendj.domain.music.value_objects import (
    FinishReason,
    PlaybackOutcome,
    PlaybackState,
    SkipReason,
)

__all__ = [
    # Entities
    "Media",
    "QueueEntry",
    "NowPlaying",
    # Store
    "RequestStore",
    "PushResult",
    # Value Objects
    "PlaybackState",
    "PlaybackOutcome",
    "FinishReason",
    "SkipReason",
    # Events
    "SongStarted",
    "SongFinished",
    # Services
    "QueueAccountant",
]
