"""Identity to handler dispatch.

Hides the lookup rules: exact identity match, then the printable-character
fallback for terminal keys, then a diagnostic default.
"""

from collections.abc import Callable, Mapping
from enum import Enum
from types import MappingProxyType

from ..events.identity import event_identity, terminal_subtype
from ..events.models import Event


class Signal(Enum):
    """What a handler asks of the consumer loop."""

    SHUTDOWN = "shutdown"


Handler = Callable[[Event], Signal | None]


def is_printable_char(key: str) -> bool:
    """True for a single printable character such as 'a' or '#'."""
    return len(key) == 1 and key.isprintable()


class Dispatcher:
    """Immutable handler table with fallback rules.

    A ``None`` entry marks an identity as known and deliberately ignored.
    """

    def __init__(
        self,
        handlers: Mapping[str, Handler | None],
        on_char: Callable[[str], None],
        on_unhandled: Handler,
    ) -> None:
        self._handlers = MappingProxyType(dict(handlers))
        self._on_char = on_char
        self._on_unhandled = on_unhandled

    @property
    def handlers(self) -> Mapping[str, Handler | None]:
        return self._handlers

    def resolve(self, identity: str) -> Handler | None:
        """Return the handler for an identity, None if it is ignored."""
        if identity in self._handlers:
            return self._handlers[identity]

        key = terminal_subtype(identity)
        if key is not None and is_printable_char(key):
            return self._append_char

        return self._on_unhandled

    def _append_char(self, event: Event) -> None:
        self._on_char(terminal_subtype(event_identity(event)) or "")

    def dispatch(self, event: Event) -> Signal | None:
        """Run the handler for an event and return its signal."""
        handler = self.resolve(event_identity(event))
        if handler is None:
            return None
        return handler(event)
