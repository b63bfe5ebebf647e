"""Port interface for resolving request locators to media."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from opendj.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.entities import Media


class MediaResolver(ABC):
    """Interface for turning a requested locator into a resolved ``Media``."""

    @abstractmethod
    async def resolve(self, locator: NonEmptyStr) -> Media:
        """Resolve a locator to media.

        Raises:
            ResolutionError: the locator is unknown, unreachable or rejected.
        """
        ...

    @abstractmethod
    def extract_locator(self, text: str) -> str | None:
        """Find a supported locator in free chat text, or None."""
        ...

    @abstractmethod
    async def stream_url(self, media: Media) -> str:
        """Resolve the direct stream URL for media right before playback.

        Raises:
            ResolutionError: no playable stream could be found.
        """
        ...
