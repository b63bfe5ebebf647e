import asyncio

import pytest
import pytest_asyncio

from opendj.application.interfaces.message_sink import MessageSink
from opendj.application.interfaces.renderer import PlaybackHandle, Renderer
from opendj.domain.music.value_objects import PlaybackOutcome

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from opendj.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def snapshot_repository(in_memory_database):
    """Create a snapshot repository with in-memory database."""
    from opendj.infrastructure.persistence.snapshot_repository import (
        SQLiteSnapshotRepository,
    )

    return SQLiteSnapshotRepository(in_memory_database)


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def make_media(title: str = "Test Song", duration: float = 180.0, video_id: str = "abc123"):
    from opendj.domain.music.entities import Media

    return Media(
        title=title,
        locator=f"https://www.youtube.com/watch?v={video_id}",
        duration_seconds=duration,
    )


def make_entry(owner: str, title: str = "Test Song", duration: float = 180.0, dedication=None):
    from opendj.domain.music.entities import QueueEntry

    return QueueEntry(
        media=make_media(title=title, duration=duration, video_id=f"id-{owner}"),
        owner=owner,
        dedication=dedication,
    )


@pytest.fixture
def sample_media():
    """Create a sample media descriptor for testing."""
    return make_media()


@pytest.fixture
def sample_entry():
    """Create a sample queue entry for testing."""
    return make_entry("alice", title="Alice Song", duration=120.0)


@pytest.fixture
def store():
    from opendj.domain.music.request_store import RequestStore

    return RequestStore()


@pytest.fixture
def event_bus():
    from opendj.domain.shared.events import EventBus

    return EventBus()


# ============================================================================
# Collaborator Fakes
# ============================================================================


class FakeHandle(PlaybackHandle):
    """Playback handle whose outcome the test decides."""

    def __init__(self) -> None:
        self._done: asyncio.Future[PlaybackOutcome] = asyncio.get_running_loop().create_future()
        self.cancel_calls = 0
        self._error: str | None = None

    @property
    def error(self) -> str | None:
        return self._error

    def finish(self, outcome: PlaybackOutcome = PlaybackOutcome.SUCCESS, error: str | None = None):
        self._error = error
        if not self._done.done():
            self._done.set_result(outcome)

    async def wait(self) -> PlaybackOutcome:
        return await asyncio.shield(self._done)

    async def cancel(self) -> None:
        self.cancel_calls += 1
        if not self._done.done():
            self._done.set_result(PlaybackOutcome.CANCELLED)


class FakeRenderer(Renderer):
    """Records started media; each start produces a new FakeHandle."""

    def __init__(self) -> None:
        self.started = []
        self.handles: list[FakeHandle] = []
        self.start_error: Exception | None = None
        self.handle_created = asyncio.Event()

    async def start(self, media):
        if self.start_error is not None:
            raise self.start_error
        handle = FakeHandle()
        self.started.append(media)
        self.handles.append(handle)
        self.handle_created.set()
        return handle

    async def next_handle(self, count: int, timeout: float = 1.0) -> FakeHandle:
        """Wait until ``count`` playback operations were started."""

        async def _wait():
            while len(self.handles) < count:
                self.handle_created.clear()
                await self.handle_created.wait()

        await asyncio.wait_for(_wait(), timeout)
        return self.handles[count - 1]


class RecordingSink(MessageSink):
    """Message sink that keeps every message in order."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    async def enqueue(self, user: str, text: str) -> None:
        self.messages.append((user, text))

    def to(self, user: str) -> list[str]:
        return [text for recipient, text in self.messages if recipient == user]


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def playback_settings():
    from opendj.config.settings import PlaybackSettings

    return PlaybackSettings(idle_backoff_seconds=0.01)
