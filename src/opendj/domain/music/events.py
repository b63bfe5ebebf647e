"""Domain events raised by the playback scheduler."""

from __future__ import annotations

from typing import Literal

from opendj.domain.music.entities import QueueEntry
from opendj.domain.music.value_objects import FinishReason
from opendj.domain.shared.events import DomainEvent


class SongStarted(DomainEvent):
    """An entry left the queue and its playback operation is about to start."""

    event_type: Literal["SongStarted"] = "SongStarted"
    entry: QueueEntry


class SongFinished(DomainEvent):
    """An entry's playback lifecycle ended, successfully or not."""

    event_type: Literal["SongFinished"] = "SongFinished"
    entry: QueueEntry
    reason: FinishReason = FinishReason.COMPLETED
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.reason == FinishReason.ERROR

