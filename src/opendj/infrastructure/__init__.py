"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite snapshot repository)
- Chat (websocket gateway, rate-limited outbox)
- Audio (yt-dlp resolver, ffmpeg renderer)
- Publishing (paste service, file fallback)
"""

from opendj.infrastructure.chat.gateway import ChatGateway
from opendj.infrastructure.persistence.database import Database

__all__ = [
    "ChatGateway",
    "Database",
]
