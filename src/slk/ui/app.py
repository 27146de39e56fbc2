"""Main Textual TUI application.

Draws the session's frames and turns key presses and resizes into
TerminalEvents. Holds no chat state of its own: every frame comes from a
SessionView painted by the session's consumer loop.
"""

import asyncio

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key, Resize
from textual.widgets import Header

from ..events.models import TerminalEvent
from .config import LogLevel
from .keys import terminal_key
from .styles import APP_CSS
from .terminal import SessionView, Terminal
from .themes import CATPPUCCIN_MOCHA
from .widgets import ChannelList, ChatPane, DebugPanel, InputLine


class ChatTextualApp(App, inherit_bindings=False):
    """Textual app for one chat session.

    Every key goes to the session; the app binds none itself, so Ctrl+C
    and Escape arrive as ordinary terminal events.
    """

    CSS = APP_CSS
    TITLE = "slk"
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        events: "asyncio.Queue[TerminalEvent | None]",
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._terminal_events = events
        self._panel_level = log_level
        self.ui_ready = asyncio.Event()

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Horizontal(id="main"):
            yield ChannelList(id="channels")
            with Vertical(id="chat-column"):
                yield ChatPane(id="chat")
                yield InputLine(self.forward_key, id="input")

        yield DebugPanel(id="debug-panel")

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(CATPPUCCIN_MOCHA)
        self.theme = "catppuccin-mocha"

        if self._panel_level is not None:
            log_panel = self.query_one("#debug-panel", DebugPanel)
            log_panel.log_level = LogLevel.from_string(self._panel_level)
            log_panel.set_visible(True)
            log_panel.trace(
                "TUI", f"Log panel enabled with level: {self._panel_level.upper()}", LogLevel.INFO
            )

        self.query_one("#input", InputLine).focus()
        self.ui_ready.set()

    def on_unmount(self) -> None:
        # End of the terminal event stream
        self._terminal_events.put_nowait(None)

    def on_key(self, event: Key) -> None:
        # Only reached when the input line has lost focus
        event.stop()
        self.forward_key(event)

    def on_resize(self, event: Resize) -> None:
        self._terminal_events.put_nowait(
            TerminalEvent("<Resize>", width=event.size.width, height=event.size.height)
        )

    def forward_key(self, event: Key) -> None:
        self._terminal_events.put_nowait(TerminalEvent(terminal_key(event.key, event.character)))

    def show_view(self, view: SessionView) -> None:
        """Paint a frame."""
        self.query_one("#channels", ChannelList).show_channels(view.channels, view.active_channel)
        self.query_one("#chat", ChatPane).show_view(view)
        self.query_one("#input", InputLine).show_text(view.input_text)
        self.query_one("#debug-panel", DebugPanel).set_visible(view.show_log)
        self.sub_title = view.status

    def trace(self, level: str, component: str, message: str) -> None:
        self.query_one("#debug-panel", DebugPanel).trace(
            component, message, LogLevel.from_string(level)
        )


class TextualTerminal(Terminal):
    """Terminal backed by a Textual app running on the session's event loop.

    Hidden design decisions:
    - The app runs as a task next to the session, not as the program's main loop
    - Key and resize events cross over through an unbounded queue
    - Log lines written before the app is mounted are buffered
    """

    def __init__(self, log_level: str | None = None) -> None:
        self._events: asyncio.Queue[TerminalEvent | None] = asyncio.Queue()
        self._app = ChatTextualApp(self._events, log_level=log_level)
        self._task: asyncio.Task | None = None
        self._pending_logs: list[tuple[str, str, str]] = []

    async def init(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._app.run_async(), name="textual")
        ready = asyncio.create_task(self._app.ui_ready.wait())
        done, _ = await asyncio.wait({self._task, ready}, return_when=asyncio.FIRST_COMPLETED)
        if ready not in done:
            ready.cancel()
            task, self._task = self._task, None
            # Surfaces the app's startup error, if it raised one
            task.result()
            raise RuntimeError("terminal UI exited during startup")

        for entry in self._pending_logs:
            self._app.trace(*entry)
        self._pending_logs.clear()

    async def close(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        if not task.done():
            self._app.exit()
        await task

    async def poll_events(self):
        while True:
            event = await self._events.get()
            if event is None:
                return
            yield event

    def paint(self, view: SessionView) -> None:
        if self._is_live():
            self._app.show_view(view)

    def log(self, level: str, component: str, message: str) -> None:
        if self._is_live():
            self._app.trace(level, component, message)
        elif not self._app.ui_ready.is_set():
            self._pending_logs.append((level, component, message))

    def _is_live(self) -> bool:
        return self._task is not None and self._app.ui_ready.is_set() and self._app.is_running
