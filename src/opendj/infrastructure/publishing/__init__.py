"""Playlist publishing adapters."""

from opendj.infrastructure.publishing.paste_publisher import FileHostPublisher, PastePublisher

__all__ = ["FileHostPublisher", "PastePublisher"]
