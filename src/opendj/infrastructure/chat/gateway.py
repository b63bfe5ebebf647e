"""
Websocket chat gateway.

Frames are text messages of the form ``TYPE {json}``. Private messages
arrive as ``PRIVMSG {"nick": ..., "data": ...}`` and are answered with frames
of the same shape.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import aiohttp
from pydantic import BaseModel, ConfigDict, ValidationError

from opendj.application.commands.chat_command import parse_command
from opendj.config.settings import ChatSettings
from opendj.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from opendj.application.commands.dispatcher import CommandDispatcher
    from opendj.application.interfaces.message_sink import MessageSink

logger = logging.getLogger(__name__)

PRIVATE_MESSAGE = "PRIVMSG"
ERROR_MESSAGE = "ERR"


class FrameContents(BaseModel):
    model_config = ConfigDict(extra="ignore")

    nick: str = ""
    data: str = ""


class ChatFrame(BaseModel):
    """One decoded websocket frame."""

    model_config = ConfigDict(frozen=True)

    type: str
    contents: FrameContents | None = None


def parse_frame(raw: str) -> ChatFrame:
    """Split ``TYPE payload`` and decode the JSON payload.

    ``ERR`` frames may carry a bare JSON string instead of an object.

    Raises:
        ValueError: the frame has no type or its payload is not valid JSON.
    """
    frame_type, _, payload = raw.partition(" ")
    if not frame_type or not payload:
        raise ValueError(ErrorMessages.UNPARSEABLE_FRAME)

    try:
        contents = FrameContents.model_validate_json(payload)
    except ValidationError:
        if frame_type != ERROR_MESSAGE:
            raise ValueError(ErrorMessages.UNPARSEABLE_FRAME) from None
        contents = FrameContents(data=payload.strip().strip('"'))
    return ChatFrame(type=frame_type, contents=contents)


def format_frame(nick: str, text: str) -> str:
    return f"{PRIVATE_MESSAGE} {FrameContents(nick=nick, data=text).model_dump_json()}"


class ChatGateway:
    """Keeps a websocket connection to the chat open and answers private messages.

    Every private message is handled in its own task; replies go through the
    message sink, never directly to the socket. ``send_private`` is the
    transport function the outbox delivers with.
    """

    def __init__(
        self,
        *,
        settings: ChatSettings,
        dispatcher: CommandDispatcher,
        sink: MessageSink,
    ) -> None:
        self._settings = settings
        self._dispatcher = dispatcher
        self._sink = sink
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._stopping = False

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    def _headers(self) -> dict[str, str]:
        token = self._settings.auth_token.get_secret_value()
        return {"Cookie": f"authtoken=;jwt={token}"}

    async def send_private(self, user: str, text: str) -> None:
        if self._ws is None or self._ws.closed:
            raise ConnectionError("chat connection is not open")
        await self._ws.send_str(format_frame(user, text))

    async def run(self) -> None:
        """Connect, listen, and reconnect after a delay until ``stop``."""
        self._stopping = False
        async with aiohttp.ClientSession(headers=self._headers()) as session:
            while not self._stopping:
                logger.info(LogTemplates.CHAT_CONNECTING)
                try:
                    async with session.ws_connect(self._settings.address) as ws:
                        self._ws = ws
                        logger.info(LogTemplates.CHAT_CONNECTED)
                        await self._listen(ws)
                except (aiohttp.ClientError, ConnectionError, TimeoutError) as e:
                    logger.error(LogTemplates.CHAT_ERROR, e)
                finally:
                    self._ws = None

                if not self._stopping:
                    await asyncio.sleep(self._settings.reconnect_delay_seconds)

    async def stop(self) -> None:
        self._stopping = True
        if self._ws is not None:
            await self._ws.close()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _listen(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        async for message in ws:
            if message.type == aiohttp.WSMsgType.TEXT:
                self.handle_frame(message.data)
            elif message.type == aiohttp.WSMsgType.ERROR:
                raise ConnectionError(str(ws.exception()))

    def handle_frame(self, raw: str) -> asyncio.Task[None] | None:
        """Decode one frame; spawn a task for private messages."""
        try:
            frame = parse_frame(raw)
        except ValueError as e:
            logger.debug(LogTemplates.CHAT_PARSE_FAILED, e)
            return None

        if frame.contents is None:
            return None
        if frame.type == ERROR_MESSAGE:
            logger.error(LogTemplates.CHAT_SERVER_ERROR, frame.contents.data)
            return None
        if frame.type != PRIVATE_MESSAGE or not frame.contents.nick:
            return None

        task = asyncio.create_task(self.answer(frame.contents.nick, frame.contents.data))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def answer(self, nick: str, text: str) -> None:
        command = parse_command(text)
        try:
            replies = await self._dispatcher.handle(command, nick)
        except Exception:
            logger.exception(LogTemplates.CHAT_COMMAND_FAILED, command.type.value, nick)
            return
        for reply in replies:
            await self._sink.enqueue(nick, reply)
