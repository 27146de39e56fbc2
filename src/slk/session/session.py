"""Session core: one consumer loop over the merged event stream.

Owns all UI state and mutates it only inside ``run``'s loop. Producers
(terminal keys, the remote connection, background requests) post immutable
events to the bus and never touch state directly.

Channel switching is optimistic: ``/join`` sets the active channel at once
and fetches history in the background. A failed fetch does not roll the
active channel back. When several fetches overlap, each result is applied
as it completes, so the last one to complete wins.
"""

from collections.abc import AsyncIterator
from datetime import datetime
from enum import Enum

from ..events.bus import EventBus
from ..events.identity import event_identity
from ..events.models import DebugEvent, Event, HistoryLoaded, RemoteEvent, TaskEvent, TerminalEvent
from ..remote.base import RemoteClient, RemoteConnectionError, RequestError
from ..remote.models import Message
from ..ui.config import (
    CHANNEL_PAGE_SIZE,
    CHANNEL_TYPES,
    DEBUG_SENDER,
    EVENT_QUEUE_MAX_SIZE,
    HISTORY_FETCH_LIMIT,
    UNKNOWN_USER,
)
from ..ui.terminal import SessionView, Terminal
from .commands import CommandError, is_command, parse_command, resolve_join_target
from .dispatcher import Dispatcher, Handler, Signal
from .state import ChannelDirectory, ChatHistory, InputBuffer

CHANNELS_LOADED = "task:channels_loaded"
USERS_LOADED = "task:users_loaded"
HISTORY_LOADED = "task:history_loaded"

# Remote events that need no reaction
IGNORED_REMOTE_EVENTS = (
    "remote:hello",
    "remote:connecting",
    "remote:latency_report",
    "remote:presence_change",
    "remote:user_typing",
)


class SessionExit(Enum):
    """Why ``Session.run`` returned."""

    INTERRUPTED = "interrupted"  # shutdown key or /quit
    DRAINED = "drained"  # every producer finished


class Session:
    """Interactive chat session.

    Example:
        session = Session(remote, terminal)
        reason = await session.run()
    """

    def __init__(
        self,
        remote: RemoteClient,
        terminal: Terminal,
        history_limit: int = HISTORY_FETCH_LIMIT,
        queue_size: int = EVENT_QUEUE_MAX_SIZE,
        show_log: bool = False,
    ) -> None:
        self._remote = remote
        self._terminal = terminal
        self._history_limit = history_limit

        self.input = InputBuffer()
        self.history = ChatHistory()
        self.directory = ChannelDirectory()
        self.active_channel: str | None = None
        self.self_id: str | None = None
        self.show_log = show_log

        self.bus = EventBus(maxsize=queue_size, debug_callback=terminal.log)
        self.dispatcher = Dispatcher(
            self._build_handlers(),
            on_char=self.input.append,
            on_unhandled=self.on_unhandled_event,
        )

    def _build_handlers(self) -> dict[str, Handler | None]:
        handlers: dict[str, Handler | None] = {
            "debug:": self.on_debug,
            "remote:connected": self.on_connected,
            "remote:message": self.on_remote_message,
            "remote:error": self.on_remote_error,
            CHANNELS_LOADED: self.on_channels_loaded,
            USERS_LOADED: self.on_users_loaded,
            HISTORY_LOADED: self.on_history_loaded,
            "terminal:<Backspace>": self.on_backspace,
            "terminal:<C-c>": self.on_shutdown,
            "terminal:<Escape>": self.on_shutdown,
            "terminal:<C-d>": self.on_toggle_log,
            "terminal:<Enter>": self.on_enter,
            "terminal:<Resize>": self.on_resize,
            "terminal:<Space>": self.on_space,
        }
        for identity in IGNORED_REMOTE_EVENTS:
            handlers[identity] = None
        return handlers

    # ------------------------------------------------------------------
    # Consumer loop
    # ------------------------------------------------------------------

    async def run(self) -> SessionExit:
        """Process events until shutdown or until every producer is done.

        The terminal is released on every exit path, including errors.
        """
        async with self._terminal:
            self.bus.add_producer("terminal", self._terminal.poll_events())
            self.bus.add_producer("remote", self._remote_events())
            self.refresh_directory()
            try:
                self.paint()
                async for event in self.bus:
                    if self.handle_event(event) is Signal.SHUTDOWN:
                        self._log("info", "shutdown requested")
                        return SessionExit.INTERRUPTED
                    self.paint()
                return SessionExit.DRAINED
            finally:
                await self.bus.close()

    def handle_event(self, event: Event) -> Signal | None:
        """Dispatch one event. Must only be called from the consumer loop."""
        return self.dispatcher.dispatch(event)

    def view(self) -> SessionView:
        active = None
        if self.active_channel is not None:
            active = self.directory.channel_name(self.active_channel)
        return SessionView(
            history=self.history,
            input_text=self.input.text,
            channels=tuple(self.directory.joined_channels()),
            active_channel=active,
            show_log=self.show_log,
            status=self._status(),
        )

    def paint(self) -> None:
        self._terminal.paint(self.view())

    def _status(self) -> str:
        if self.self_id is None:
            return "connecting"
        return f"connected as {self.directory.user_name(self.self_id)}"

    # ------------------------------------------------------------------
    # Producers
    # ------------------------------------------------------------------

    async def _remote_events(self) -> AsyncIterator[Event]:
        try:
            async for event in self._remote.connect():
                yield event
        except RemoteConnectionError as e:
            yield DebugEvent(f"connection error: {e}")

    async def _directory_events(self) -> AsyncIterator[Event]:
        try:
            channels = await self._remote.load_channels(CHANNEL_PAGE_SIZE, CHANNEL_TYPES)
        except RequestError as e:
            yield DebugEvent(str(e))
            return
        yield DebugEvent(f"Loaded {len(channels)} channels")
        yield TaskEvent(CHANNELS_LOADED, channels)

        try:
            users = await self._remote.load_users()
        except RequestError as e:
            yield DebugEvent(str(e))
            return
        yield DebugEvent(f"Loaded {len(users)} users")
        yield TaskEvent(USERS_LOADED, users)

    async def _fetch_history(self, channel_key: str) -> Event:
        try:
            messages = await self._remote.get_history(channel_key, self._history_limit)
        except RequestError as e:
            return DebugEvent(f"could not load history: {e}")
        return TaskEvent(HISTORY_LOADED, HistoryLoaded(channel_key, tuple(messages)))

    async def _post_message(self, channel_key: str, text: str) -> Event | None:
        try:
            await self._remote.post_message(channel_key, text)
        except RequestError as e:
            return DebugEvent(f"could not send message: {e}")
        return None

    def refresh_directory(self) -> None:
        """Reload channels and users in the background."""
        self.bus.add_producer("directory", self._directory_events())

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def debugf(self, text: str) -> None:
        """Emit a diagnostic event; it is shown once the loop reaches it."""
        self.bus.post_nowait(DebugEvent(text))

    def _log(self, level: str, message: str) -> None:
        self._terminal.log(level, "Session", message)

    def on_debug(self, event: DebugEvent) -> None:
        self.history.add_message(
            Message(timestamp=datetime.now(), sender=DEBUG_SENDER, text=event.text)
        )

    def on_unhandled_event(self, event: Event) -> None:
        self.debugf(f"unhandled event {event_identity(event)}")

    # ------------------------------------------------------------------
    # Terminal handlers
    # ------------------------------------------------------------------

    def on_space(self, event: TerminalEvent) -> None:
        self.input.append(" ")

    def on_backspace(self, event: TerminalEvent) -> None:
        self.input.backspace()

    def on_resize(self, event: TerminalEvent) -> None:
        self._log("debug", f"resized to {event.width}x{event.height}")

    def on_toggle_log(self, event: TerminalEvent) -> None:
        self.show_log = not self.show_log

    def on_shutdown(self, event: Event) -> Signal:
        return Signal.SHUTDOWN

    def on_enter(self, event: TerminalEvent) -> Signal | None:
        text = self.input.submit()
        if not text:
            return None
        if is_command(text):
            return self.on_command(text)
        self.send_message(text)
        return None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def on_command(self, line: str) -> Signal | None:
        try:
            command = parse_command(line)
            if command.name == "join":
                self.switch_channel(resolve_join_target(command, self.directory))
            elif command.name == "part":
                self.leave_channel()
            elif command.name == "clear":
                self.history.clear()
            elif command.name == "refresh":
                self.refresh_directory()
            elif command.name == "quit":
                return Signal.SHUTDOWN
            else:
                self.debugf(f"unprocessed command: {line}")
        except CommandError as e:
            self.debugf(str(e))
        return None

    def switch_channel(self, channel_key: str) -> None:
        """Make a channel active and fetch its history in the background."""
        self._log(
            "info",
            f"switching to channel {self.directory.channel_name(channel_key)} with key {channel_key}",
        )
        self.active_channel = channel_key
        self.bus.spawn(f"history:{channel_key}", self._fetch_history(channel_key))

    def leave_channel(self) -> None:
        self.active_channel = None
        self.history.clear()

    def send_message(self, text: str) -> None:
        if self.active_channel is None:
            self.debugf("no active channel, use /join #channel first")
            return
        self.bus.spawn("post", self._post_message(self.active_channel, text))

    # ------------------------------------------------------------------
    # Remote and task handlers
    # ------------------------------------------------------------------

    def sender_name(self, user_key: str, fallback: str = "") -> str:
        """Resolve a sender; unknown keys yield the unknown-user placeholder."""
        if user_key:
            return self.directory.user_name(user_key)
        return fallback or UNKNOWN_USER

    def on_connected(self, event: RemoteEvent) -> None:
        self.self_id = event.data.get("self_id")
        self._log("info", f"connected as {self.self_id}")

    def on_remote_error(self, event: RemoteEvent) -> None:
        error = event.data.get("error") or event.data
        self.debugf(f"remote error: {error}")

    def on_remote_message(self, event: RemoteEvent) -> None:
        data = event.data
        channel_key = data.get("channel") or ""
        if channel_key != self.active_channel:
            self._log(
                "debug",
                f"message in {self.directory.channel_name(channel_key)} from "
                f"{self.sender_name(data.get('user') or '')} not shown",
            )
            return

        self.history.add_message(
            Message(
                timestamp=data.get("timestamp") or datetime.now(),
                sender=self.sender_name(data.get("user") or "", data.get("username") or ""),
                text=data.get("text") or "",
                user_key=data.get("user") or "",
                ts=data.get("ts") or "",
            )
        )

    def on_channels_loaded(self, event: TaskEvent) -> None:
        self.directory.replace_channels(_payload(event, dict))

    def on_users_loaded(self, event: TaskEvent) -> None:
        self.directory.replace_users(_payload(event, dict))

    def on_history_loaded(self, event: TaskEvent) -> None:
        loaded = _payload(event, HistoryLoaded)
        if loaded.channel_key != self.active_channel:
            self._log(
                "warning",
                f"history of {self.directory.channel_name(loaded.channel_key)} "
                "arrived after a newer switch, applying it anyway",
            )
        self.history.replace(
            message.model_copy(update={"sender": self.sender_name(message.user_key, message.sender)})
            for message in loaded.messages
        )


def _payload(event: TaskEvent, expected: type):
    """Return a task payload, failing loudly on a wiring mistake."""
    if not isinstance(event.payload, expected):
        raise TypeError(
            f"{event.key} expects {expected.__name__}, got {type(event.payload).__name__}"
        )
    return event.payload
