"""Pytest configuration and shared fixtures."""
import asyncio
from collections.abc import Iterable
from datetime import datetime

import pytest

from slk.events.models import RemoteEvent, TerminalEvent
from slk.remote.base import RemoteClient, RemoteConnectionError, RequestError
from slk.remote.models import Channel, Message, User
from slk.session import Session
from slk.ui.config import DEBUG_SENDER
from slk.ui.terminal import SessionView, Terminal


class FakeRemoteClient(RemoteClient):
    """In-memory remote client.

    ``failures`` names operations that raise RequestError. ``gates`` holds
    an asyncio.Event per channel key; history fetches for that channel wait
    on it, so tests can choose the order in which fetches complete.
    """

    def __init__(
        self,
        channels: Iterable[Channel] = (),
        users: Iterable[User] = (),
        histories: dict[str, list[Message]] | None = None,
        events: Iterable[RemoteEvent] = (),
        self_id: str = "U0",
        connect_error: str | None = None,
    ) -> None:
        self.channels = list(channels)
        self.users = list(users)
        self.histories = histories or {}
        self.events = list(events)
        self.self_id = self_id
        self.connect_error = connect_error
        self.failures: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.posted: list[tuple[str, str]] = []
        self.marked: list[tuple[str, str]] = []
        self.closed = False

    def _check(self, operation: str) -> None:
        if operation in self.failures:
            raise RequestError(operation, "boom")

    async def connect(self):
        if self.connect_error is not None:
            raise RemoteConnectionError(self.connect_error)
        yield RemoteEvent(type="connected", data={"self_id": self.self_id})
        for event in self.events:
            yield event

    async def identify(self) -> str:
        return self.self_id

    async def get_channels(self, cursor="", page_size=1000, types=()):
        self._check("loading channels")
        start = int(cursor or 0)
        page = self.channels[start:start + page_size]
        next_cursor = str(start + page_size) if start + page_size < len(self.channels) else ""
        return page, next_cursor

    async def get_users(self) -> list[User]:
        self._check("loading users")
        return list(self.users)

    async def get_history(self, channel_key: str, limit: int = 100) -> list[Message]:
        gate = self.gates.get(channel_key)
        if gate is not None:
            await gate.wait()
        self._check("loading history")
        return list(self.histories.get(channel_key, []))[-limit:]

    async def post_message(self, channel_key: str, text: str) -> None:
        self._check("posting message")
        self.posted.append((channel_key, text))

    async def mark_read(self, channel_key: str, timestamp: str) -> None:
        self._check("marking read")
        self.marked.append((channel_key, timestamp))

    async def close(self) -> None:
        self.closed = True


class FakeTerminal(Terminal):
    """Terminal that replays scripted events and records every frame."""

    def __init__(self, events: Iterable[TerminalEvent] = (), paint_error: Exception | None = None):
        self.events = list(events)
        self.paint_error = paint_error
        self.frames: list[SessionView] = []
        self.logs: list[tuple[str, str, str]] = []
        self.initialized = False
        self.closed = False

    async def init(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.closed = True

    async def poll_events(self):
        for event in self.events:
            yield event

    def paint(self, view: SessionView) -> None:
        if self.paint_error is not None:
            raise self.paint_error
        self.frames.append(view)

    def log(self, level: str, component: str, message: str) -> None:
        self.logs.append((level, component, message))


def make_message(text: str, sender: str = "U1", minute: int = 0) -> Message:
    return Message(
        timestamp=datetime(2024, 3, 5, 14, minute),
        sender=sender,
        text=text,
        user_key=sender,
        ts=f"1709647{minute:03d}.000100",
    )


def key_events(text: str) -> list[TerminalEvent]:
    """Terminal events for typing a line and pressing Enter."""
    events = [TerminalEvent("<Space>" if char == " " else char) for char in text]
    events.append(TerminalEvent("<Enter>"))
    return events


def type_line(session: Session, text: str):
    """Feed a typed line to the session; returns the Enter handler's signal."""
    signal = None
    for event in key_events(text):
        signal = session.handle_event(event)
    return signal


async def run_pending(session: Session) -> None:
    """Process queued events until every background task has finished."""
    async for event in session.bus:
        session.handle_event(event)


def diagnostics(session: Session) -> list[str]:
    """Texts of the diagnostic messages in the chat history."""
    return [m.text for m in session.history.messages if m.sender == DEBUG_SENDER]


@pytest.fixture
def channels():
    """Three channels; only two are joined."""
    return [
        Channel(key="C1", name="general", is_member=True, num_members=10),
        Channel(key="C2", name="random", is_member=True, num_members=4),
        Channel(key="C3", name="secret", is_private=True),
    ]


@pytest.fixture
def users():
    return [
        User(key="U1", name="alice", real_name="Alice Liddell"),
        User(key="U2", name="bob"),
        User(key="U9", name="gone", deleted=True),
    ]


@pytest.fixture
def histories():
    return {
        "C1": [make_message("hello general", "U1", 1), make_message("morning", "U2", 2)],
        "C2": [make_message("random thought", "U2", 3)],
    }


@pytest.fixture
def remote(channels, users, histories):
    return FakeRemoteClient(channels=channels, users=users, histories=histories)


@pytest.fixture
def terminal():
    return FakeTerminal()


@pytest.fixture
def session(remote, terminal, channels, users):
    """Session with its directory already loaded."""
    s = Session(remote, terminal)
    s.directory.replace_channels({c.key: c for c in channels})
    s.directory.replace_users({u.key: u for u in users if not u.deleted})
    return s
