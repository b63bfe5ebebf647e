"""Port interface for exporting the rendered playlist."""

from __future__ import annotations

from abc import ABC, abstractmethod


class PlaylistPublisher(ABC):
    """Publishes playlist text somewhere a chat user can open it."""

    @abstractmethod
    async def publish(self, text: str) -> str:
        """Publish ``text`` and return a URL or path pointing to it.

        Raises:
            OSError: the text could not be published.
        """
        ...
