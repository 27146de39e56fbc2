"""Event module for slk.

Provides the closed set of event variants, their dispatch identity and the
fan-in bus that merges producers into one consumer loop.
"""

from .bus import EventBus
from .identity import event_identity
from .models import DebugEvent, Event, HistoryLoaded, RemoteEvent, TaskEvent, TerminalEvent

__all__ = [
    "DebugEvent",
    "Event",
    "EventBus",
    "HistoryLoaded",
    "RemoteEvent",
    "TaskEvent",
    "TerminalEvent",
    "event_identity",
]
