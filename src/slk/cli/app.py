"""Main CLI application using Typer."""
import asyncio
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ..remote import Channel, RemoteClient, RemoteError
from ..session import Session, SessionExit
from ..ui.config import CHANNEL_PAGE_SIZE, CHANNEL_TYPES, HISTORY_FETCH_LIMIT
from .providers import get_config, get_remote

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="slk",
    help="Terminal chat client for Slack workspaces",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


@app.callback()
def configure(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: $SLK_CONFIG or ~/.slk.json)"
    ),
):
    """Terminal chat client for Slack workspaces."""
    ctx.obj = config


def _remote(ctx: typer.Context) -> RemoteClient:
    return get_remote(get_config(ctx.obj, console))


def find_channel(channels: dict[str, Channel], target: str) -> Channel | None:
    """Find a channel by key, '#name' or bare name."""
    if target in channels:
        return channels[target]
    name = target.removeprefix("#")
    for channel in channels.values():
        if channel.name == name:
            return channel
    return None


@app.command(name="tui")
def tui_command(
    ctx: typer.Context,
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive chat session."""
    async def _tui() -> SessionExit:
        from ..ui import TextualTerminal

        remote = _remote(ctx)
        terminal = TextualTerminal(log_level=log_level)
        async with remote:
            session = Session(remote, terminal, show_log=log_level is not None)
            return await session.run()

    try:
        reason = asyncio.run(_tui())
    except KeyboardInterrupt:
        reason = SessionExit.INTERRUPTED

    if reason is SessionExit.DRAINED:
        console.print("[dim]All event sources closed.[/dim]")
    console.print("[dim]Goodbye![/dim]")


@app.command()
def users(ctx: typer.Context):
    """List users in the workspace."""
    async def _users():
        async with _remote(ctx) as remote:
            return await remote.load_users()

    try:
        found = asyncio.run(_users())
    except RemoteError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Key", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    table.add_column("Title", style="yellow")

    for user in sorted(found.values(), key=lambda u: u.display_name.lower()):
        table.add_row(user.key, user.display_name, user.email, user.title)

    console.print(table)
    console.print(f"[dim]{len(found)} users[/dim]")


@app.command()
def channels(ctx: typer.Context):
    """List channels, skipping group direct messages."""
    async def _channels():
        async with _remote(ctx) as remote:
            return await remote.load_channels(CHANNEL_PAGE_SIZE, CHANNEL_TYPES)

    try:
        found = asyncio.run(_channels())
    except RemoteError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Key", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Visibility", style="yellow", width=10)
    table.add_column("Members", style="green", justify="right")
    table.add_column("Joined", width=6)

    listed = sorted(
        (channel for channel in found.values() if not channel.is_mpim),
        key=lambda c: c.name,
    )
    for channel in listed:
        table.add_row(
            channel.key,
            channel.display_name,
            channel.visibility,
            str(channel.num_members),
            "yes" if channel.is_member else "",
        )

    console.print(table)


@app.command()
def cat(
    ctx: typer.Context,
    channel: str = typer.Argument(..., help="Channel key, #name or name"),
):
    """Post stdin to a channel, one message per line.

    The channel is first marked read up to the last message someone else sent.
    """
    async def _cat() -> int:
        async with _remote(ctx) as remote:
            self_id = await remote.identify()
            target = find_channel(
                await remote.load_channels(CHANNEL_PAGE_SIZE, CHANNEL_TYPES), channel
            )
            if target is None:
                console.print(f"[red]Error: channel not found: {channel}[/red]")
                raise typer.Exit(code=1)

            history = await remote.get_history(target.key, HISTORY_FETCH_LIMIT)
            last = next(
                (m for m in reversed(history) if m.user_key != self_id and m.text),
                None,
            )
            if last is not None:
                await remote.mark_read(target.key, last.ts)

            posted = 0
            for line in sys.stdin:
                line = line.rstrip("\n")
                if line:
                    await remote.post_message(target.key, line)
                    posted += 1
            return posted

    try:
        posted = asyncio.run(_cat())
    except RemoteError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Posted {posted} messages to {channel}[/green]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
