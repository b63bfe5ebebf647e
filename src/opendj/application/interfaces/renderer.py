"""Port interface for the external playback operation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import Media
    from ...domain.music.value_objects import PlaybackOutcome


class PlaybackHandle(ABC):
    """One running playback operation."""

    @abstractmethod
    async def wait(self) -> PlaybackOutcome:
        """Block until the operation completes, fails or is cancelled."""
        ...

    @abstractmethod
    async def cancel(self) -> None:
        """Ask the operation to stop. Safe to call more than once."""
        ...

    @property
    @abstractmethod
    def error(self) -> str | None:
        """Failure description once ``wait`` returned FAILURE."""
        ...


class Renderer(ABC):
    """Starts playback operations for media."""

    @abstractmethod
    async def start(self, media: Media) -> PlaybackHandle:
        """Start rendering ``media``.

        Raises:
            ResolutionError: the media stream could not be located.
            PlaybackFailure: the operation could not be started.
        """
        ...
