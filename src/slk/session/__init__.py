"""Session module for slk.

Owns the interactive state (input buffer, chat history, channel directory)
and the consumer loop that mutates it in response to events.
"""

from .commands import Command, CommandError, parse_command
from .dispatcher import Dispatcher, Signal
from .session import Session, SessionExit
from .state import ChannelDirectory, ChatHistory, InputBuffer

__all__ = [
    "ChannelDirectory",
    "ChatHistory",
    "Command",
    "CommandError",
    "Dispatcher",
    "InputBuffer",
    "Session",
    "SessionExit",
    "Signal",
    "parse_command",
]
