"""Factory for creating remote messaging clients."""

from typing import Any

from .base import RemoteClient
from .providers import SlackRemoteClient


def create_remote_client(service: str = "slack", **config: Any) -> RemoteClient:
    """Create a remote client instance.

    This factory function hides which messaging service is behind the
    session.

    Args:
        service: Service type ("slack" currently supported)
        **config: Service-specific configuration
            For Slack:
                - api_token: str (required)
                - app_token: str (needed for real-time events)
                - cookie: str | None

    Returns:
        Remote client, not yet connected

    Raises:
        ValueError: If service type is not supported
        TypeError: If required configuration is missing

    Example:
        >>> client = create_remote_client("slack", api_token="xoxp-...", app_token="xapp-...")
        >>> async with client:
        ...     channels = await client.load_channels()
    """
    if service.lower() == "slack":
        if "api_token" not in config:
            raise TypeError("Slack client requires 'api_token' in config")
        return SlackRemoteClient(**config)

    raise ValueError(
        f"Unsupported messaging service: {service}. "
        f"Supported services: slack"
    )
