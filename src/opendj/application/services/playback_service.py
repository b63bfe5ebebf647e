"""Playback Scheduler - the single consumer of the request store."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.music.entities import NowPlaying, QueueEntry
from ...domain.music.events import SongFinished, SongStarted
from ...domain.music.value_objects import (
    FinishReason,
    PlaybackOutcome,
    PlaybackState,
    SkipReason,
)
from ...domain.shared.datetime_utils import monotonic
from ...domain.shared.exceptions import (
    EmptyQueueError,
    InvalidOperationError,
    PlaybackFailure,
    ResolutionError,
)
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import PlaybackSettings
    from ...domain.music.request_store import RequestStore
    from ...domain.shared.events import EventBus
    from ...domain.voting.user_set import UserSet
    from ..interfaces.renderer import PlaybackHandle, Renderer
    from ..interfaces.snapshot_repository import SnapshotRepository

logger = logging.getLogger(__name__)


class PlaybackScheduler:
    """Pops entries one at a time and drives the renderer through each of them.

    IDLE -> PLAYING when an entry was popped, PLAYING -> IDLE once its playback
    operation completed, failed or was cancelled. An empty store is the idle
    steady state: the loop sleeps ``idle_backoff_seconds`` (or until a push
    wakes it) and tries again. Failures end the current song only; the loop
    keeps going until ``stop`` is called.

    The store lock is only held for the pop; the wait on the renderer happens
    outside of it so commands stay responsive while a song plays.
    """

    def __init__(
        self,
        *,
        store: RequestStore,
        renderer: Renderer,
        event_bus: EventBus,
        skip_votes: UserSet,
        settings: PlaybackSettings,
        snapshot_repository: SnapshotRepository | None = None,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self._store = store
        self._renderer = renderer
        self._event_bus = event_bus
        self._skip_votes = skip_votes
        self._settings = settings
        self._snapshots = snapshot_repository
        self._clock = clock

        self._state = PlaybackState.IDLE
        self._now_playing: NowPlaying | None = None
        self._handle: PlaybackHandle | None = None
        self._cancel_requested: asyncio.Event | None = None
        self._skip_reason: SkipReason | None = None
        self._wake = asyncio.Event()
        self._stopping = False
        self._task: asyncio.Task[None] | None = None

    # === Read-only state ===

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def now_playing(self) -> NowPlaying | None:
        return self._now_playing

    def elapsed(self) -> float:
        """Seconds the current entry has been playing (0 when idle)."""
        if self._now_playing is None:
            return 0.0
        return self._now_playing.elapsed(self._clock())

    # === Lifecycle ===

    def start(self) -> asyncio.Task[None]:
        """Spawn the scheduler loop as a background task."""
        if self._task is None or self._task.done():
            self._stopping = False
            self._task = asyncio.create_task(self.run(), name="opendj-scheduler")
        return self._task

    async def stop(self) -> None:
        """Cancel any active playback and wait for the loop to exit."""
        self._stopping = True
        self.skip(SkipReason.SHUTDOWN)
        self._wake.set()
        if self._task is not None:
            try:
                await asyncio.wait_for(self._task, timeout=self._settings.idle_backoff_seconds)
            except TimeoutError:
                self._task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._task
            self._task = None

    async def run(self) -> None:
        """Play entries until ``stop`` is called."""
        logger.info(LogTemplates.SCHEDULER_STARTED)
        self._transition(PlaybackState.IDLE)
        try:
            while not self._stopping:
                try:
                    played = await self.play_next()
                except Exception:
                    logger.exception(LogTemplates.SCHEDULER_LOOP_ERROR)
                    played = False
                if not played and not self._stopping:
                    await self._backoff()
        finally:
            self._transition(PlaybackState.STOPPED)
            logger.info(LogTemplates.SCHEDULER_STOPPED)

    def notify_pushed(self) -> None:
        """Wake an idle loop early because the store received an entry."""
        self._wake.set()

    async def _backoff(self) -> None:
        delay = self._settings.idle_backoff_seconds
        logger.debug(LogTemplates.SCHEDULER_IDLE, delay)
        try:
            await asyncio.wait_for(self._wake.wait(), timeout=delay)
        except TimeoutError:
            pass
        finally:
            self._wake.clear()

    # === One iteration ===

    async def play_next(self) -> bool:
        """Pop the head entry and play it to the end.

        Returns:
            False if the store was empty, True once an entry went through its
            whole lifecycle (whatever the outcome).
        """
        try:
            entry = await self._store.pop()
        except EmptyQueueError:
            return False

        await self._play(entry)
        return True

    async def _play(self, entry: QueueEntry) -> None:
        self._skip_votes.clear()
        self._skip_reason = None
        self._cancel_requested = asyncio.Event()
        self._now_playing = NowPlaying(entry=entry, started_at=self._clock())
        self._transition(PlaybackState.PLAYING)
        logger.info(LogTemplates.TRACK_STARTED, entry.owner, entry.title)

        reason = FinishReason.ERROR
        error: str | None = None
        try:
            await self._event_bus.publish(SongStarted(entry=entry))
            reason, error = await self._render(entry)
        finally:
            logger.info(LogTemplates.TRACK_FINISHED, entry.title, reason.value)
            try:
                await self._event_bus.publish(
                    SongFinished(entry=entry, reason=reason, error=error)
                )
            finally:
                self._now_playing = None
                # The playlist header names the current entry.
                self._store.mark_dirty()
                self._handle = None
                self._cancel_requested = None
                if self._state.is_playing:
                    self._transition(PlaybackState.IDLE)
                await self._persist()

    async def _render(self, entry: QueueEntry) -> tuple[FinishReason, str | None]:
        assert self._cancel_requested is not None
        cancel_requested = self._cancel_requested

        try:
            handle = await self._renderer.start(entry.media)
        except ResolutionError as e:
            logger.error(LogTemplates.PLAYBACK_RESOLVE_FAILED, entry.title, e.message)
            return FinishReason.ERROR, e.message
        except PlaybackFailure as e:
            logger.error(LogTemplates.PLAYBACK_FAILED, entry.title, e.message)
            return FinishReason.ERROR, e.message
        except Exception as e:
            logger.exception(LogTemplates.PLAYBACK_FAILED, entry.title, e)
            return FinishReason.ERROR, str(e)

        self._handle = handle
        wait_task = asyncio.create_task(handle.wait())
        cancel_task = asyncio.create_task(cancel_requested.wait())
        try:
            done, _ = await asyncio.wait(
                {wait_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            wait_task.cancel()
            await handle.cancel()
            raise
        finally:
            cancel_task.cancel()

        if wait_task not in done:
            logger.info(
                LogTemplates.TRACK_SKIPPED,
                entry.title,
                self._skip_reason.value if self._skip_reason else "cancelled",
            )
            wait_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await wait_task
            try:
                await handle.cancel()
            except Exception as e:
                logger.warning(LogTemplates.RENDERER_KILL_FAILED, e)
            return FinishReason.SKIPPED, None

        try:
            outcome = wait_task.result()
        except Exception as e:
            logger.exception(LogTemplates.PLAYBACK_FAILED, entry.title, e)
            return FinishReason.ERROR, str(e)

        if outcome == PlaybackOutcome.FAILURE:
            logger.error(LogTemplates.PLAYBACK_FAILED, entry.title, handle.error)
            return FinishReason.ERROR, handle.error
        return FinishReason.from_outcome(outcome), None

    # === Control ===

    def skip(self, reason: SkipReason = SkipReason.MODERATOR) -> bool:
        """Cancel the active playback operation.

        Returns immediately; the scheduler task stops waiting on the renderer
        and moves on. Returns False when nothing is playing.
        """
        if self._cancel_requested is None or self._now_playing is None:
            if reason != SkipReason.SHUTDOWN:
                logger.debug(LogTemplates.SKIP_IGNORED_IDLE)
            return False
        self._skip_reason = reason
        self._cancel_requested.set()
        return True

    # === Internals ===

    def _transition(self, new_state: PlaybackState) -> None:
        if new_state == self._state:
            return
        if not self._state.can_transition_to(new_state):
            raise InvalidOperationError(
                operation=f"transition to {new_state.value}",
                current_state=self._state.value,
            )
        self._state = new_state

    async def _persist(self) -> None:
        if self._snapshots is None:
            return
        await self._snapshots.save_store(self._store)
