"""
Application Commands

Chat command parsing and the dispatcher that executes commands.
"""

from opendj.application.commands.chat_command import ChatCommand, CommandType, parse_command
from opendj.application.commands.dispatcher import CommandDispatcher

__all__ = [
    # Parsing
    "ChatCommand",
    "CommandType",
    "parse_command",
    # Dispatch
    "CommandDispatcher",
]
