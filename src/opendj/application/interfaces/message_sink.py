"""Port interface for outbound chat messages."""

from __future__ import annotations

from abc import ABC, abstractmethod


class MessageSink(ABC):
    """Accepts private messages for delivery; pacing is the sink's concern."""

    @abstractmethod
    async def enqueue(self, user: str, text: str) -> None:
        ...
