"""Terminal UI module for slk.

Provides the terminal collaborator the session paints to, and a
Textual-based implementation of it.

Module structure (each module hides a design decision):
- config.py: Constants (queue size, fetch limits, formats, placeholders)
- terminal.py: Abstract terminal and the frame it paints
- keys.py: Key naming (how toolkit keys become session keys)
- formatting.py: Message and channel line formatting
- widgets.py: Custom widgets (channel list, chat pane, input line, log)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- app.py: Textual application and terminal adapter
"""

from .app import ChatTextualApp, TextualTerminal
from .config import LogLevel
from .terminal import SessionView, Terminal
from .widgets import ChannelList, ChatPane, DebugPanel, InputLine

__all__ = [
    "ChannelList",
    "ChatPane",
    "ChatTextualApp",
    "DebugPanel",
    "InputLine",
    "LogLevel",
    "SessionView",
    "Terminal",
    "TextualTerminal",
]
