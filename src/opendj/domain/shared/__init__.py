"""Shared kernel: exceptions, constrained types, messages and the event bus."""

from opendj.domain.shared.exceptions import (
    DomainError,
    EmptyQueueError,
    IndexOutOfRangeError,
    InvalidOperationError,
    NotEntryOwnerError,
    PlaybackFailure,
    ResolutionError,
    UserNotQueuedError,
)

__all__ = [
    "DomainError",
    "EmptyQueueError",
    "IndexOutOfRangeError",
    "InvalidOperationError",
    "NotEntryOwnerError",
    "PlaybackFailure",
    "ResolutionError",
    "UserNotQueuedError",
]
