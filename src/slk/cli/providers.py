"""Provider factory functions for CLI.

Centralizes creation of the remote client from configuration.
Hides configuration details from command implementations.
"""

from pathlib import Path

import typer
from rich.console import Console

from ..remote import RemoteClient, create_remote_client
from .config import ConfigError, SlkConfig, load_config

# Default console for output
_console = Console()


def get_config(path: Path | None = None, console: Console | None = None) -> SlkConfig:
    """Load configuration, exiting with an error message if unusable.

    Args:
        path: Config file path, None for SLK_CONFIG or ~/.slk.json
        console: Optional Rich console for output

    Raises:
        SystemExit: If the configuration cannot be loaded
    """
    con = console or _console
    try:
        return load_config(path)
    except ConfigError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def get_remote(config: SlkConfig) -> RemoteClient:
    """Create the Slack remote client from configuration."""
    return create_remote_client(
        "slack",
        api_token=config.api_token,
        app_token=config.app_token,
        cookie=config.cookie,
    )
