"""Slash-command parsing and execution.

Commands are matched against a fixed dispatch table; each known command has
a handler that validates its preconditions and performs one repository
action through the RepoClient.
"""

from src.repobot.commands.handlers import CommandHandlers, FanoutError
from src.repobot.commands.models import (
    COMMANDS,
    Command,
    CommandAction,
    CommandSpec,
    lookup_command,
    parse_command,
)

__all__ = [
    "COMMANDS",
    "Command",
    "CommandAction",
    "CommandHandlers",
    "CommandSpec",
    "FanoutError",
    "lookup_command",
    "parse_command",
]
