"""Mutable UI state owned by the session.

Hides how the compose line, the chat log and the directories are stored.
Only the session's consumer loop mutates these objects.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from ..remote.models import Channel, Message, User
from ..ui.config import UNKNOWN_CHANNEL, UNKNOWN_USER


class InputBuffer:
    """Compose line being typed by the user."""

    def __init__(self) -> None:
        self._chars: list[str] = []

    @property
    def text(self) -> str:
        return "".join(self._chars)

    def __len__(self) -> int:
        return len(self._chars)

    def append(self, char: str) -> None:
        """Append one character."""
        self._chars.append(char)

    def backspace(self) -> None:
        """Remove the last character, if any."""
        if self._chars:
            self._chars.pop()

    def submit(self) -> str:
        """Return the current contents and empty the buffer."""
        text = self.text
        self._chars = []
        return text


class ChatHistory:
    """Ordered message log of the active channel.

    Insertion order is display order. The whole log is kept; rendering only
    looks at its tail.
    """

    def __init__(self, messages: Iterable[Message] = ()) -> None:
        self._messages: list[Message] = list(messages)

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def add_message(self, message: Message) -> None:
        """Append a message at the bottom."""
        self._messages.append(message)

    def clear(self) -> None:
        """Remove every message."""
        self._messages = []

    def replace(self, messages: Iterable[Message]) -> None:
        """Swap in a freshly fetched log in one step."""
        self._messages = list(messages)

    def render(self, height: int) -> list[Message]:
        """Return the last ``min(height, len(self))`` messages, oldest first."""
        if height <= 0:
            return []
        return self._messages[-height:]


class ChannelDirectory:
    """Channel and user caches used for command matching and name lookups.

    Both mappings are replaced wholesale on refresh, never patched.
    """

    def __init__(self) -> None:
        self._channels: Mapping[str, Channel] = MappingProxyType({})
        self._users: Mapping[str, User] = MappingProxyType({})

    @property
    def channels(self) -> Mapping[str, Channel]:
        return self._channels

    @property
    def users(self) -> Mapping[str, User]:
        return self._users

    def replace_channels(self, channels: Mapping[str, Channel]) -> None:
        self._channels = MappingProxyType(dict(channels))

    def replace_users(self, users: Mapping[str, User]) -> None:
        self._users = MappingProxyType(dict(users))

    def find_by_display_name(self, display_name: str) -> str | None:
        """Return the key of the channel whose '#name' equals display_name."""
        for key, channel in self._channels.items():
            if channel.display_name == display_name:
                return key
        return None

    def channel_name(self, key: str | None) -> str:
        """Display name of a channel, or the unknown-channel placeholder."""
        channel = self._channels.get(key) if key else None
        if channel is None:
            return UNKNOWN_CHANNEL
        return channel.display_name

    def user_name(self, key: str | None) -> str:
        """Display name of a user, or the unknown-user placeholder."""
        user = self._users.get(key) if key else None
        if user is None:
            return UNKNOWN_USER
        return user.display_name

    def joined_channels(self) -> list[Channel]:
        """Channels we are a member of, sorted by name."""
        return sorted(
            (c for c in self._channels.values() if c.is_member),
            key=lambda c: c.name,
        )
