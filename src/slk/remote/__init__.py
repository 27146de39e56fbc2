"""Remote messaging abstraction layer for slk."""

from .base import RemoteClient, RemoteConnectionError, RemoteError, RequestError
from .factory import create_remote_client
from .models import Channel, Message, User

__all__ = [
    "Channel",
    "Message",
    "RemoteClient",
    "RemoteConnectionError",
    "RemoteError",
    "RequestError",
    "User",
    "create_remote_client",
]
