"""Dispatch keys for events.

An identity has the form ``<source>:<subtype>``. It is computed from the
event variant and its subtype only, never from payload contents.
"""

from typing import Any

from .models import DebugEvent, RemoteEvent, TaskEvent, TerminalEvent

REMOTE_PREFIX = "remote:"
TERMINAL_PREFIX = "terminal:"
DEBUG_IDENTITY = "debug:"


def event_identity(event: Any) -> str:
    """Return the dispatch key for an event.

    Total: any object yields a key. Events with an empty subtype fall back to
    the key their producer embedded in them.
    """
    if isinstance(event, RemoteEvent):
        if event.type:
            return f"{REMOTE_PREFIX}{event.type}"
        return event.fallback_key
    if isinstance(event, TerminalEvent):
        if event.key:
            return f"{TERMINAL_PREFIX}{event.key}"
        return event.fallback_key
    if isinstance(event, DebugEvent):
        return DEBUG_IDENTITY
    if isinstance(event, TaskEvent):
        return event.key
    return f"unknown:{type(event).__name__}"


def terminal_subtype(identity: str) -> str | None:
    """Return the key part of a terminal identity, or None for other sources."""
    if identity.startswith(TERMINAL_PREFIX):
        return identity[len(TERMINAL_PREFIX):]
    return None
