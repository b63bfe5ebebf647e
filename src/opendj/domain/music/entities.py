"""Core domain entities for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from opendj.domain.shared.datetime_utils import monotonic, utcnow
from opendj.domain.shared.types import (
    DurationSeconds,
    MediaTitleStr,
    NonEmptyStr,
    NonNegativeFloat,
    UserName,
    UtcDatetimeField,
)


class Media(BaseModel):
    """Immutable value object describing resolved, playable media."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: MediaTitleStr
    locator: NonEmptyStr
    duration_seconds: DurationSeconds = 0.0

    @property
    def duration_formatted(self) -> str:
        from opendj.domain.music.formatting import format_duration

        return format_duration(self.duration_seconds)


class QueueEntry(BaseModel):
    """One queued request: the media, who asked for it and who it is for."""

    model_config = ConfigDict(frozen=True, strict=True)

    media: Media
    owner: UserName
    dedication: UserName | None = None
    requested_at: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def duration_seconds(self) -> float:
        return self.media.duration_seconds

    @property
    def title(self) -> str:
        return self.media.title

    @property
    def is_dedicated(self) -> bool:
        return self.dedication is not None

    def with_dedication(self, target: UserName | None) -> QueueEntry:
        """Return a copy of this entry dedicated to ``target``.

        Raises:
            ValidationError: ``target`` is not a valid user name.
        """
        return QueueEntry(
            media=self.media,
            owner=self.owner,
            dedication=target,
            requested_at=self.requested_at,
        )


class NowPlaying(BaseModel):
    """The entry being rendered, paired with the moment playback started.

    ``started_at`` is a monotonic clock reading; elapsed and remaining times are
    computed against another monotonic reading supplied by the caller.
    """

    model_config = ConfigDict(frozen=True)

    entry: QueueEntry
    started_at: NonNegativeFloat = Field(default_factory=monotonic)

    def elapsed(self, now: float | None = None) -> float:
        now = monotonic() if now is None else now
        return max(0.0, now - self.started_at)

    def remaining(self, now: float | None = None) -> float:
        """Time left in the entry, floored at zero."""
        return max(0.0, self.entry.duration_seconds - self.elapsed(now))
