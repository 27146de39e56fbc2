"""UI configuration constants.

Centralizes magic numbers and configuration values for the session and UI.
"""


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Event bus configuration
EVENT_QUEUE_MAX_SIZE = 1024  # Events buffered before producers wait

# Remote request sizes
HISTORY_FETCH_LIMIT = 100  # Messages fetched on channel switch
CHANNEL_PAGE_SIZE = 1000  # Channels per conversations.list page
CHANNEL_TYPES = ("public_channel", "private_channel", "im", "mpim")

# Chat display configuration
MESSAGE_TIMESTAMP_FORMAT = "%d/%m %H:%M"
DEBUG_SENDER = "debug"  # Sender shown for diagnostic messages

# Name lookup placeholders
UNKNOWN_USER = "<unknown user>"
UNKNOWN_CHANNEL = "<unknown channel>"

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages
