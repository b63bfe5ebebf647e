"""Chat infrastructure - websocket gateway and outbound message pacing."""

from opendj.infrastructure.chat.gateway import ChatGateway, format_frame, parse_frame
from opendj.infrastructure.chat.outbox import RateLimitedOutbox

__all__ = [
    "ChatGateway",
    "RateLimitedOutbox",
    "format_frame",
    "parse_frame",
]
