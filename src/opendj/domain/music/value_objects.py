"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum


class PlaybackState(Enum):
    """Scheduler state with enforced transitions.

    State transitions:
    - IDLE -> PLAYING (an entry was popped)
    - PLAYING -> IDLE (the playback operation completed, failed or was cancelled)
    - Any -> STOPPED (scheduler shutdown)
    """

    IDLE = "idle"
    PLAYING = "playing"
    STOPPED = "stopped"

    def can_transition_to(self, target: PlaybackState) -> bool:
        """Check if transition to target state is valid."""
        valid_transitions = {
            PlaybackState.IDLE: {PlaybackState.PLAYING, PlaybackState.STOPPED},
            PlaybackState.PLAYING: {PlaybackState.IDLE, PlaybackState.STOPPED},
            PlaybackState.STOPPED: {PlaybackState.IDLE},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_playing(self) -> bool:
        return self == PlaybackState.PLAYING


class PlaybackOutcome(Enum):
    """How an external playback operation ended."""

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"


class FinishReason(Enum):
    """Reasons an entry's playback lifecycle ended."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    ERROR = "error"

    @classmethod
    def from_outcome(cls, outcome: PlaybackOutcome) -> FinishReason:
        return {
            PlaybackOutcome.SUCCESS: cls.COMPLETED,
            PlaybackOutcome.CANCELLED: cls.SKIPPED,
            PlaybackOutcome.FAILURE: cls.ERROR,
        }[outcome]


class SkipReason(Enum):
    """Why the active playback operation was cancelled."""

    VOTE = "vote"
    MODERATOR = "moderator"
    SHUTDOWN = "shutdown"
