"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout:
- Channel list on the left
- Chat pane above a one-line input on the right
- Trace log docked at the bottom, hidden unless enabled
"""

APP_CSS = """
/* ============================================
   Main Screen Layout
   ============================================ */
Screen {
    background: $background;
}

#main {
    height: 1fr;
}

/* ============================================
   Channel List
   ============================================ */
#channels {
    width: 30%;
    max-width: 40;
    height: 100%;
    background: $panel;
    border: round $secondary 60%;
    border-title-color: $secondary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
}

/* ============================================
   Chat Column
   ============================================ */
#chat-column {
    width: 1fr;
    height: 100%;
}

#chat {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
}

#input {
    height: 3;
    background: $surface;
    border: round $accent 60%;
    border-title-color: $accent;
    border-title-align: left;
    padding: 0 1;

    &:focus {
        border: round $accent;
    }
}

/* ============================================
   Trace Log Panel (toggled with Ctrl+D)
   ============================================ */
#debug-panel {
    dock: bottom;
    height: auto;
    min-height: 6;
    max-height: 14;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
    scrollbar-gutter: stable;
    display: none;
}

/* ============================================
   Header - App Title Bar
   ============================================ */
Header {
    background: $panel;
    color: $foreground;
    dock: top;
    height: 1;
}

HeaderTitle {
    color: $primary;
    text-style: bold;
}
"""
