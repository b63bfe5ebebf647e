"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class EmptyQueueError(DomainError):
    """Raised when popping or peeking an empty request store."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "The queue is empty", code="EMPTY_QUEUE")


class IndexOutOfRangeError(DomainError):
    """Raised when a positional store operation gets an invalid index."""

    def __init__(self, index: int, length: int, message: str | None = None) -> None:
        msg = message or f"Index {index} is out of range for a queue of {length} entries"
        super().__init__(msg, code="INDEX_OUT_OF_RANGE")
        self.index = index
        self.length = length


class UserNotQueuedError(DomainError):
    """Raised when a user has no entry in the request store."""

    def __init__(self, user: str, message: str | None = None) -> None:
        super().__init__(message or f"{user} has no song in the queue", code="USER_NOT_QUEUED")
        self.user = user


class ResolutionError(DomainError):
    """Raised by media resolvers when a locator cannot become playable media."""

    def __init__(self, locator: str, reason: str | None = None) -> None:
        msg = f"Could not resolve '{locator}'" + (f": {reason}" if reason else "")
        super().__init__(msg, code="RESOLUTION_ERROR")
        self.locator = locator
        self.reason = reason


class NotEntryOwnerError(DomainError):
    """Raised when a user tries to change a queue entry they do not own."""

    def __init__(self, user: str, index: int, message: str | None = None) -> None:
        msg = message or f"{user} does not own the entry at index {index}"
        super().__init__(msg, code="NOT_ENTRY_OWNER")
        self.user = user
        self.index = index


class PlaybackFailure(DomainError):
    """Raised or reported by renderers when a playback operation fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="PLAYBACK_FAILURE")


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state
