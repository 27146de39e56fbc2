"""Key name translation.

Hides how Textual names keys. The session only sees terminal keys as:
- a single printable character ("a", "#", "/")
- a bracketed name ("<Enter>", "<Backspace>", "<C-c>")
"""

# Textual key names with a fixed bracketed form
NAMED_KEYS = {
    "enter": "<Enter>",
    "backspace": "<Backspace>",
    "escape": "<Escape>",
    "space": "<Space>",
    "tab": "<Tab>",
    "delete": "<Delete>",
    "up": "<Up>",
    "down": "<Down>",
    "left": "<Left>",
    "right": "<Right>",
    "home": "<Home>",
    "end": "<End>",
    "pageup": "<PageUp>",
    "pagedown": "<PageDown>",
}

CTRL_PREFIX = "ctrl+"


def terminal_key(key: str, character: str | None = None) -> str:
    """Translate a Textual key into the session's key name.

    Args:
        key: Textual key name ("a", "enter", "ctrl+c", "number_sign")
        character: Printable character for the key, if any

    Returns:
        Single character for printable keys, otherwise a bracketed name
    """
    if key in NAMED_KEYS:
        return NAMED_KEYS[key]
    if key.startswith(CTRL_PREFIX) and len(key) == len(CTRL_PREFIX) + 1:
        return f"<C-{key[-1]}>"
    if character is not None and len(character) == 1 and character.isprintable():
        return character
    return f"<{key}>"
