"""Rate-limited outbox: the single egress path for chat messages."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict

from opendj.application.interfaces.message_sink import MessageSink
from opendj.config.settings import MessagingSettings
from opendj.domain.shared.messages import LogTemplates
from opendj.domain.shared.types import NonEmptyStr

logger = logging.getLogger(__name__)

SendFunc = Callable[[str, str], Awaitable[None]]


class OutgoingMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: NonEmptyStr
    text: str


class RateLimitedOutbox(MessageSink):
    """Bounded FIFO drained by one sender task, one message per interval.

    ``enqueue`` waits while the queue is full. Delivery failures are logged
    and the message is dropped; the sender keeps running.
    """

    def __init__(self, send: SendFunc, settings: MessagingSettings | None = None) -> None:
        self._send = send
        self._settings = settings or MessagingSettings()
        self._queue: asyncio.Queue[OutgoingMessage] = asyncio.Queue(
            maxsize=self._settings.outbox_size
        )
        self._task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        return self._settings.send_interval_ms / 1000

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def enqueue(self, user: str, text: str) -> None:
        message = OutgoingMessage(user=user, text=text)
        if self._queue.full():
            logger.warning(LogTemplates.OUTBOX_FULL, user)
        await self._queue.put(message)

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name="opendj-outbox")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def join(self) -> None:
        """Wait until every queued message was handed to the transport."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                logger.debug(LogTemplates.MESSAGE_SENDING, message.user, message.text)
                await self._send(message.user, message.text)
            except Exception as e:
                logger.error(LogTemplates.MESSAGE_SEND_FAILED, message.user, e)
            finally:
                self._queue.task_done()
            await asyncio.sleep(self.interval)
