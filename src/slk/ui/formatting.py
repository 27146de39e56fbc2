"""Text formatting utilities for the TUI.

Hides how messages and channel lists become lines of text. Long lines are
cut at the viewport width; nothing wraps.
"""

from collections.abc import Iterable

from rich.text import Text

from ..remote.models import Channel, Message
from .config import DEBUG_SENDER, MESSAGE_TIMESTAMP_FORMAT


def truncate(line: str, width: int) -> str:
    """Cut a line to at most ``width`` characters."""
    if width <= 0:
        return ""
    return line[:width]


def format_message_line(message: Message, width: int | None = None) -> str:
    """Format a message as 'DD/MM HH:MM sender: text' on one line."""
    text = " ".join(message.text.splitlines())
    line = f"{message.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)} {message.sender}: {text}"
    if width is None:
        return line
    return truncate(line, width)


def render_chat(messages: Iterable[Message], width: int) -> Text:
    """Render already-selected messages as styled text, one row each."""
    rendered = Text(no_wrap=True, overflow="crop")
    for index, message in enumerate(messages):
        if index:
            rendered.append("\n")
        line = format_message_line(message, width)
        style = "dim italic" if message.sender == DEBUG_SENDER else ""
        rendered.append(line, style=style)
    return rendered


def format_channel_list(channels: Iterable[Channel], active: str | None = None) -> Text:
    """One '#name' per line, the active channel highlighted."""
    rendered = Text(no_wrap=True, overflow="ellipsis")
    for index, channel in enumerate(channels):
        if index:
            rendered.append("\n")
        name = channel.display_name
        rendered.append(name, style="bold reverse" if name == active else "")
    return rendered
