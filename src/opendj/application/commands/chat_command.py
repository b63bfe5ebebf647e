"""
Chat Commands

Parsing of raw chat lines into typed commands.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

COMMAND_PREFIX = "-"


class CommandType(Enum):
    """Operations a chat user can ask for."""

    PLAYING = "playing"
    NEXT = "next"
    QUEUE = "queue"
    PLAYLIST = "playlist"
    SUBSCRIBE_TOGGLE = "updateme"
    LIKE = "like"
    DEDICATE = "dedicate"
    REMOVE = "remove"
    SKIP = "skip"
    FORCE_SKIP = "forceskip"
    SUBMIT = "submit"


# Commands whose full text must match exactly; anything else is argument taking.
_EXACT = {
    CommandType.PLAYING,
    CommandType.NEXT,
    CommandType.QUEUE,
    CommandType.PLAYLIST,
    CommandType.SUBSCRIBE_TOGGLE,
    CommandType.LIKE,
    CommandType.SKIP,
    CommandType.FORCE_SKIP,
}
_WITH_ARGUMENT = {CommandType.DEDICATE, CommandType.REMOVE}


class ChatCommand(BaseModel):
    """One parsed chat command and its raw argument text."""

    model_config = ConfigDict(frozen=True, strict=True)

    type: CommandType
    argument: str = ""

    @property
    def has_argument(self) -> bool:
        return bool(self.argument)


def parse_command(text: str) -> ChatCommand:
    """Parse a private chat line.

    ``-dedicate`` and ``-remove`` take the rest of the line as argument. Lines
    that are no known command become a SUBMIT carrying the whole text, which
    the dispatcher then searches for a media locator.
    """
    stripped = text.strip()
    if stripped.startswith(COMMAND_PREFIX):
        word, _, rest = stripped[len(COMMAND_PREFIX):].partition(" ")
        word = word.lower()
        for command_type in _EXACT:
            if word == command_type.value and not rest.strip():
                return ChatCommand(type=command_type)
        for command_type in _WITH_ARGUMENT:
            if word == command_type.value:
                return ChatCommand(type=command_type, argument=rest.strip())
    return ChatCommand(type=CommandType.SUBMIT, argument=stripped)
