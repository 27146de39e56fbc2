"""Abstract base class for remote messaging clients.

This module hides the design decision of which messaging service is used.
Implementations must handle service-specific details like:
- Authentication and transport
- Real-time event delivery
- Pagination and record format conversion
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from typing import Any

from ..events.models import RemoteEvent
from .models import Channel, Message, User

DEFAULT_CHANNEL_TYPES = ("public_channel", "private_channel", "im", "mpim")


class RemoteError(Exception):
    """Base class for remote messaging failures."""


class RemoteConnectionError(RemoteError):
    """The real-time connection could not be established or was lost.

    Reconnection is the client's responsibility; the session only reports it.
    """


class RequestError(RemoteError):
    """A request (channels, users, history, post, mark) failed."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason


class RemoteClient(ABC):
    """Abstract remote messaging client.

    Supports async context manager protocol for proper resource cleanup:
        async with client:
            channels = await client.load_channels()
    """

    @abstractmethod
    def connect(self) -> AsyncIterator[RemoteEvent]:
        """Open the real-time connection and stream its events.

        The first event is ``connected`` with ``{"self_id": ...}``.

        Raises:
            RemoteConnectionError: If the connection fails
        """

    @abstractmethod
    async def identify(self) -> str:
        """Return the user id we are authenticated as."""

    @abstractmethod
    async def get_channels(
        self,
        cursor: str = "",
        page_size: int = 1000,
        types: Sequence[str] = DEFAULT_CHANNEL_TYPES,
    ) -> tuple[list[Channel], str]:
        """Fetch one page of channels.

        Returns:
            The page and the cursor of the next page ("" when done)

        Raises:
            RequestError: If the request fails
        """

    @abstractmethod
    async def get_users(self) -> list[User]:
        """Fetch every user, including deleted ones."""

    @abstractmethod
    async def get_history(self, channel_key: str, limit: int = 100) -> list[Message]:
        """Fetch recent messages of a channel, oldest first."""

    @abstractmethod
    async def post_message(self, channel_key: str, text: str) -> None:
        """Post a message to a channel."""

    @abstractmethod
    async def mark_read(self, channel_key: str, timestamp: str) -> None:
        """Move the channel's read marker to a message timestamp."""

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def load_channels(
        self,
        page_size: int = 1000,
        types: Sequence[str] = DEFAULT_CHANNEL_TYPES,
    ) -> dict[str, Channel]:
        """Load every channel page into a mapping keyed by channel key."""
        channels: dict[str, Channel] = {}
        cursor = ""
        while True:
            page, cursor = await self.get_channels(cursor, page_size, types)
            for channel in page:
                channels[channel.key] = channel
            if not cursor:
                return channels

    async def load_users(self) -> dict[str, User]:
        """Load every non-deleted user into a mapping keyed by user key."""
        users = await self.get_users()
        return {user.key: user for user in users if not user.deleted}

    async def __aenter__(self) -> "RemoteClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
