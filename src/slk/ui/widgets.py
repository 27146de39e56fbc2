"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Channel list rendering
- Chat pane tail rendering (no scroll-back, no wrapping)
- Compose line display and key capture
- Trace log rendering and level filtering
"""

from collections.abc import Callable
from datetime import datetime

from rich.markup import escape
from textual.events import Key, Resize
from textual.widgets import RichLog, Static

from ..remote.models import Channel
from .config import LOG_MAX_MESSAGE_LENGTH, LOG_TIMESTAMP_FORMAT, LogLevel
from .formatting import format_channel_list, render_chat
from .terminal import SessionView


class ChannelList(Static):
    """Joined channels, one per line."""

    BORDER_TITLE = "Channels"

    def show_channels(self, channels: tuple[Channel, ...], active: str | None) -> None:
        self.border_subtitle = f"{len(channels)} joined"
        self.update(format_channel_list(channels, active))


class ChatPane(Static):
    """Tail of the chat history, as many rows as fit."""

    BORDER_TITLE = "Messages"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._view: SessionView | None = None

    def show_view(self, view: SessionView) -> None:
        """Remember the latest frame and render it at the current size."""
        self._view = view
        self.border_title = view.active_channel or "Messages"
        self.border_subtitle = f"{len(view.history)} messages"
        self._render_tail()

    def on_resize(self, event: Resize) -> None:
        self._render_tail()

    def _render_tail(self) -> None:
        if self._view is None:
            return
        size = self.content_size
        messages = self._view.history.render(size.height)
        self.update(render_chat(messages, size.width))


class InputLine(Static, can_focus=True):
    """Compose line. Captures every key and hands it to a callback.

    The text shown is whatever the session's input buffer holds; this widget
    never edits it.
    """

    BORDER_TITLE = "Input"

    def __init__(self, on_key_press: Callable[[Key], None], *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._on_key_press = on_key_press

    def show_text(self, text: str) -> None:
        # trailing block is the cursor
        self.update(f"{text}█")

    def on_key(self, event: Key) -> None:
        event.stop()
        event.prevent_default()
        self._on_key_press(event)


class DebugPanel(RichLog, can_focus=False):
    """Log panel for real-time session tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def trace(
        self,
        component: str,
        message: str,
        level: int = LogLevel.DEBUG
    ) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (Session, Bus, Slack, TUI)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        component_colors = {
            "TUI": "cyan",
            "Session": "green",
            "Bus": "magenta",
            "Slack": "blue",
        }
        level_color = level_colors.get(level, "white")
        comp_color = component_colors.get(component, "white")

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<5}[/] "
            f"[{comp_color}]\\[{component}][/] {escape(message)}"
        )

    def set_visible(self, visible: bool) -> None:
        """Show or hide the panel."""
        if self.display != visible:
            self.display = visible
            self._update_subtitle()
