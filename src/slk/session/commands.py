"""Parsing of submitted "/command" lines."""

from dataclasses import dataclass

from .state import ChannelDirectory

COMMAND_PREFIX = "/"


class CommandError(Exception):
    """A command could not be processed (malformed or unresolved)."""


@dataclass(frozen=True)
class Command:
    """A parsed command line such as "/join #general"."""

    name: str
    args: tuple[str, ...] = ()
    line: str = ""


def is_command(line: str) -> bool:
    return line.startswith(COMMAND_PREFIX)


def parse_command(line: str) -> Command:
    """Split a command line into name and arguments.

    Raises:
        CommandError: If the line has no command name
    """
    parts = line[len(COMMAND_PREFIX):].split()
    if not parts:
        raise CommandError(f"malformed command: {line!r}")
    return Command(name=parts[0], args=tuple(parts[1:]), line=line)


def resolve_join_target(command: Command, directory: ChannelDirectory) -> str:
    """Return the channel key named by "/join #name".

    Raises:
        CommandError: If the argument count is wrong or no channel matches
    """
    if len(command.args) != 1:
        raise CommandError("failed to process command, need 1 argument")

    target = command.args[0]
    key = directory.find_by_display_name(target)
    if key is None:
        raise CommandError(f"channel not found: {target}")
    return key
