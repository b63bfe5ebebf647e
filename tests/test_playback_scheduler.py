"""
Tests for the Playback Scheduler

Tests for:
- Idle -> Playing -> Idle lifecycle and event emission
- Failure handling without stopping the loop
- Cancellation via skip
- Idle backoff and wake-up on push
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from conftest import make_entry
from opendj.application.services.playback_service import PlaybackScheduler
from opendj.application.services.playlist_service import PlaylistExporter
from opendj.domain.music.events import SongFinished, SongStarted
from opendj.domain.music.value_objects import (
    FinishReason,
    PlaybackOutcome,
    PlaybackState,
    SkipReason,
)
from opendj.domain.shared.exceptions import PlaybackFailure, ResolutionError
from opendj.domain.voting.user_set import UserSet


@pytest.fixture
def skip_votes():
    return UserSet()


@pytest.fixture
def events(event_bus):
    """Record every published playback event in order."""
    recorded = []

    async def record(event):
        recorded.append(event)

    event_bus.subscribe(SongStarted, record)
    event_bus.subscribe(SongFinished, record)
    return recorded


@pytest.fixture
def scheduler(store, fake_renderer, event_bus, skip_votes, playback_settings):
    return PlaybackScheduler(
        store=store,
        renderer=fake_renderer,
        event_bus=event_bus,
        skip_votes=skip_votes,
        settings=playback_settings,
    )


async def _wait_for(predicate, timeout=1.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout)


# =============================================================================
# One iteration
# =============================================================================


class TestPlayNext:
    """Tests for a single scheduler iteration."""

    @pytest.mark.asyncio
    async def test_empty_store_returns_false(self, scheduler, fake_renderer):
        assert await scheduler.play_next() is False
        assert fake_renderer.started == []

    @pytest.mark.asyncio
    async def test_plays_head_and_returns_to_idle(self, scheduler, store, fake_renderer, events):
        await store.push(make_entry("alice"))

        task = asyncio.create_task(scheduler.play_next())
        handle = await fake_renderer.next_handle(1)

        assert scheduler.state == PlaybackState.PLAYING
        assert scheduler.now_playing.entry.owner == "alice"
        assert len(store) == 0

        handle.finish(PlaybackOutcome.SUCCESS)
        assert await task is True

        assert scheduler.state == PlaybackState.IDLE
        assert scheduler.now_playing is None
        assert [type(e) for e in events] == [SongStarted, SongFinished]
        assert events[1].reason == FinishReason.COMPLETED

    @pytest.mark.asyncio
    async def test_skip_votes_cleared_on_new_song(self, scheduler, store, fake_renderer, skip_votes):
        skip_votes.add("bob")
        skip_votes.add("carol")
        await store.push(make_entry("alice"))

        task = asyncio.create_task(scheduler.play_next())
        handle = await fake_renderer.next_handle(1)

        assert len(skip_votes) == 0
        handle.finish()
        await task

    @pytest.mark.asyncio
    async def test_failure_outcome_reports_error(self, scheduler, store, fake_renderer, events):
        await store.push(make_entry("alice"))

        task = asyncio.create_task(scheduler.play_next())
        handle = await fake_renderer.next_handle(1)
        handle.finish(PlaybackOutcome.FAILURE, error="renderer exited with code 1")
        await task

        finished = events[-1]
        assert finished.reason == FinishReason.ERROR
        assert finished.failed is True
        assert finished.error == "renderer exited with code 1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            ResolutionError("loc", "gone"),
            PlaybackFailure("could not start"),
            RuntimeError("boom"),
        ],
    )
    async def test_start_errors_end_song_only(self, scheduler, store, fake_renderer, events, error):
        fake_renderer.start_error = error
        await store.push(make_entry("alice"))

        assert await scheduler.play_next() is True

        assert scheduler.state == PlaybackState.IDLE
        assert events[-1].reason == FinishReason.ERROR

    @pytest.mark.asyncio
    async def test_snapshot_saved_after_each_song(
        self, store, fake_renderer, event_bus, skip_votes, playback_settings, snapshot_repository
    ):
        scheduler = PlaybackScheduler(
            store=store,
            renderer=fake_renderer,
            event_bus=event_bus,
            skip_votes=skip_votes,
            settings=playback_settings,
            snapshot_repository=snapshot_repository,
        )
        await store.push(make_entry("alice"))
        await store.push(make_entry("bob"))

        task = asyncio.create_task(scheduler.play_next())
        (await fake_renderer.next_handle(1)).finish()
        await task

        saved = await snapshot_repository.load_queue()
        assert [e.owner for e in saved] == ["bob"]

    @pytest.mark.asyncio
    async def test_playlist_republished_when_song_ends(self, scheduler, store, fake_renderer):
        publisher = MagicMock()
        publisher.publish = AsyncMock(side_effect=["https://paste/1", "https://paste/2"])
        exporter = PlaylistExporter(store=store, scheduler=scheduler, publisher=publisher)
        await store.push(make_entry("alice", title="Only Song"))

        task = asyncio.create_task(scheduler.play_next())
        handle = await fake_renderer.next_handle(1)
        assert await exporter.export() == "https://paste/1"
        handle.finish()
        await task

        assert await exporter.export() == "https://paste/2"
        assert "Only Song" in publisher.publish.await_args_list[0].args[0]
        assert "Only Song" not in publisher.publish.await_args_list[1].args[0]


# =============================================================================
# Skip
# =============================================================================


class TestSkip:
    """Tests for cancelling the active playback operation."""

    def test_skip_while_idle_returns_false(self, scheduler):
        assert scheduler.skip() is False

    @pytest.mark.asyncio
    async def test_skip_cancels_handle_promptly(self, scheduler, store, fake_renderer, events):
        await store.push(make_entry("alice"))

        task = asyncio.create_task(scheduler.play_next())
        handle = await fake_renderer.next_handle(1)

        assert scheduler.skip(SkipReason.VOTE) is True
        await asyncio.wait_for(task, 1.0)

        assert handle.cancel_calls == 1
        assert events[-1].reason == FinishReason.SKIPPED
        assert scheduler.state == PlaybackState.IDLE

    @pytest.mark.asyncio
    async def test_elapsed_uses_clock(self, store, fake_renderer, event_bus, skip_votes, playback_settings):
        now = [100.0]
        scheduler = PlaybackScheduler(
            store=store,
            renderer=fake_renderer,
            event_bus=event_bus,
            skip_votes=skip_votes,
            settings=playback_settings,
            clock=lambda: now[0],
        )
        await store.push(make_entry("alice"))

        task = asyncio.create_task(scheduler.play_next())
        handle = await fake_renderer.next_handle(1)
        now[0] = 142.5

        assert scheduler.elapsed() == 42.5
        handle.finish()
        await task
        assert scheduler.elapsed() == 0.0


# =============================================================================
# Loop
# =============================================================================


class TestRunLoop:
    """Tests for the long-running scheduler loop."""

    @pytest.mark.asyncio
    async def test_plays_queue_in_order_then_idles(self, scheduler, store, fake_renderer):
        """push(A), push(B) while idle: A plays with B waiting, then B, then idle."""
        await store.push(make_entry("alice", duration=180.0))
        await store.push(make_entry("bob", duration=240.0))

        scheduler.start()
        first = await fake_renderer.next_handle(1)

        assert scheduler.now_playing.entry.owner == "alice"
        assert [e.owner for e in await store.snapshot()] == ["bob"]

        first.finish()
        second = await fake_renderer.next_handle(2)
        assert scheduler.now_playing.entry.owner == "bob"
        assert len(store) == 0

        second.finish()
        await _wait_for(lambda: scheduler.now_playing is None)
        await asyncio.sleep(0.05)
        assert scheduler.state == PlaybackState.IDLE
        assert len(fake_renderer.started) == 2

        await scheduler.stop()
        assert scheduler.state == PlaybackState.STOPPED

    @pytest.mark.asyncio
    async def test_loop_survives_failures(self, scheduler, store, fake_renderer):
        await store.push(make_entry("alice"))
        await store.push(make_entry("bob"))

        scheduler.start()
        (await fake_renderer.next_handle(1)).finish(PlaybackOutcome.FAILURE, error="boom")
        second = await fake_renderer.next_handle(2)

        assert scheduler.now_playing.entry.owner == "bob"
        second.finish()
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_push_wakes_idle_loop(self, store, fake_renderer, event_bus, skip_votes):
        from opendj.config.settings import PlaybackSettings

        scheduler = PlaybackScheduler(
            store=store,
            renderer=fake_renderer,
            event_bus=event_bus,
            skip_votes=skip_votes,
            settings=PlaybackSettings(idle_backoff_seconds=30.0),
        )
        scheduler.start()
        await asyncio.sleep(0.01)

        await store.push(make_entry("alice"))
        scheduler.notify_pushed()

        handle = await fake_renderer.next_handle(1, timeout=1.0)
        handle.finish()
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_cancels_active_playback(self, scheduler, store, fake_renderer):
        await store.push(make_entry("alice"))

        scheduler.start()
        handle = await fake_renderer.next_handle(1)
        await scheduler.stop()

        assert handle.cancel_calls >= 1
        assert scheduler.is_running is False
