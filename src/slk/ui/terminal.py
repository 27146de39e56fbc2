"""Abstract terminal the session paints to and reads keys from.

This module hides which UI toolkit draws the screen. Implementations handle:
- Terminal setup and guaranteed release (async context manager)
- Translating toolkit key/resize events into TerminalEvents
- Laying out and painting a SessionView
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..events.models import TerminalEvent
from ..remote.models import Channel

if TYPE_CHECKING:
    from ..session.state import ChatHistory


@dataclass(frozen=True)
class SessionView:
    """Everything the terminal needs to paint one frame."""

    history: "ChatHistory"
    input_text: str = ""
    channels: tuple[Channel, ...] = ()
    active_channel: str | None = None  # display name of the active channel
    show_log: bool = False
    status: str = ""


class Terminal(ABC):
    """Abstract terminal collaborator.

    Usage:
        async with terminal:
            async for event in terminal.poll_events():
                ...
                terminal.paint(view)
        # Terminal restored, even on error
    """

    @abstractmethod
    async def init(self) -> None:
        """Take over the terminal."""

    @abstractmethod
    async def close(self) -> None:
        """Restore the terminal. Safe to call more than once."""

    @abstractmethod
    def poll_events(self) -> AsyncIterator[TerminalEvent]:
        """Stream key presses and resizes until the terminal closes."""

    @abstractmethod
    def paint(self, view: SessionView) -> None:
        """Render a frame."""

    def log(self, level: str, component: str, message: str) -> None:
        """Trace output (debug/info/warning/error). Ignored by default."""

    async def __aenter__(self) -> "Terminal":
        await self.init()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
