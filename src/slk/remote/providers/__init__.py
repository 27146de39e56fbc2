from .slack import SlackRemoteClient

__all__ = ["SlackRemoteClient"]
