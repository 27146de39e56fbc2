"""Event variants flowing through the event bus.

Hides the representation of everything the session reacts to. The set of
variants is closed: every producer posts one of these immutable values and
nothing else.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class RemoteEvent:
    """An event received from the remote messaging connection."""

    type: str  # protocol subtype, e.g. "message", "connected", "hello"
    data: Mapping[str, Any] = field(default_factory=dict)
    fallback_key: str = "remote:unknown"


@dataclass(frozen=True)
class TerminalEvent:
    """A key press or resize reported by the terminal.

    ``key`` is either a single character ("a") or a named key in angle
    brackets ("<Enter>", "<Resize>", ...).
    """

    key: str
    width: int = 0
    height: int = 0
    fallback_key: str = "terminal:unknown"


@dataclass(frozen=True)
class DebugEvent:
    """A diagnostic message to display."""

    text: str


@dataclass(frozen=True)
class TaskEvent:
    """An ad hoc event kind carrying its own identity key.

    Used for background task results ("task:history_loaded", ...) so new
    kinds need no change to the identity function.
    """

    key: str
    payload: Any = None


Event = Union[RemoteEvent, TerminalEvent, DebugEvent, TaskEvent]


@dataclass(frozen=True)
class HistoryLoaded:
    """Result of a history fetch for one channel."""

    channel_key: str
    messages: tuple = ()
