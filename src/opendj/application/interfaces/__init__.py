"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the engine and the
collaborators it drives: media resolution, rendering, persistence, outbound
messaging and playlist publishing.
"""

from opendj.application.interfaces.media_resolver import MediaResolver
from opendj.application.interfaces.message_sink import MessageSink
from opendj.application.interfaces.playlist_publisher import PlaylistPublisher
from opendj.application.interfaces.renderer import PlaybackHandle, Renderer
from opendj.application.interfaces.snapshot_repository import SnapshotRepository

__all__ = [
    "MediaResolver",
    "MessageSink",
    "PlaybackHandle",
    "PlaylistPublisher",
    "Renderer",
    "SnapshotRepository",
]
