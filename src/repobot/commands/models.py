"""Slash-command models and the command dispatch table.

A comment whose body starts with "/" is a command. The first whitespace
delimited token is the command name (matched case-sensitively); the
remaining tokens form the raw argument string. Each known command has a
CommandSpec entry in COMMANDS describing who may run it, whether it needs a
pull request, and the shape of the repository_dispatch it fires.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


COMMAND_PREFIX = "/"


class CommandAction(str, Enum):
    """How a command is carried out.

    Attributes:
        ASSIGN: Assign the commenter to the issue.
        RETEST_FAILED: Re-run failed workflow runs of the pull request head.
        MAKE_ME_LAUGH: Post a joke.
        DISPATCH: Fire a repository_dispatch event for the pull request.
    """

    ASSIGN = "assign"
    RETEST_FAILED = "retest_failed"
    MAKE_ME_LAUGH = "make_me_laugh"
    DISPATCH = "dispatch"


class Command(BaseModel):
    """A parsed slash-command.

    Attributes:
        name: Command name including the leading slash, e.g. "/ok-to-perf".
        args: Remaining tokens joined with single spaces (may be empty).
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, pattern=r"^/\S*$")
    args: str = ""

    @property
    def bare_name(self) -> str:
        """Command name without the leading slash."""
        return self.name[len(COMMAND_PREFIX):]

    def split_first_arg(self) -> Tuple[Optional[str], str]:
        """Split off the first argument token.

        Returns:
            (first token or None, remaining args joined with single spaces)
        """
        tokens = self.args.split()
        if not tokens:
            return None, ""
        return tokens[0], " ".join(tokens[1:])


class CommandSpec(BaseModel):
    """Static description of a known command.

    Attributes:
        name: Command name including the leading slash.
        action: How the command is carried out.
        privileged: Whether the actor must be in the allowlist.
        requires_pull_request: Whether the command only works on pull requests.
        event_type: repository_dispatch event type (DISPATCH only).
        payload_command: Command name recorded in the dispatch payload.
        includes_args: Whether free-form args go into the dispatch payload.
        takes_previous_version: Whether the first arg is a previous version.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    action: CommandAction
    privileged: bool = True
    requires_pull_request: bool = False
    event_type: Optional[str] = None
    payload_command: Optional[str] = None
    includes_args: bool = False
    takes_previous_version: bool = False


def _dispatch_spec(
    name: str,
    event_type: Optional[str] = None,
    includes_args: bool = True,
    takes_previous_version: bool = False,
) -> CommandSpec:
    bare = name[len(COMMAND_PREFIX):]
    return CommandSpec(
        name=name,
        action=CommandAction.DISPATCH,
        requires_pull_request=True,
        event_type=event_type or bare,
        payload_command=bare,
        includes_args=includes_args,
        takes_previous_version=takes_previous_version,
    )


COMMANDS: Dict[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec(name="/assign", action=CommandAction.ASSIGN, privileged=False),
        CommandSpec(
            name="/retest-failed",
            action=CommandAction.RETEST_FAILED,
            privileged=False,
            requires_pull_request=True,
        ),
        CommandSpec(name="/make-me-laugh", action=CommandAction.MAKE_ME_LAUGH),
        _dispatch_spec("/ok-to-test", event_type="e2e-test", includes_args=False),
        _dispatch_spec("/ok-to-perf", event_type="perf-test"),
        _dispatch_spec("/ok-to-perf-components", event_type="components-perf-test"),
        _dispatch_spec("/test-sdk-all"),
        _dispatch_spec("/test-sdk-java"),
        _dispatch_spec("/test-sdk-python"),
        _dispatch_spec("/test-sdk-js"),
        _dispatch_spec("/test-sdk-go"),
        _dispatch_spec("/test-version-skew", takes_previous_version=True),
    )
}


def parse_command(comment_body: str) -> Optional[Command]:
    """Parse a comment body into a Command.

    Args:
        comment_body: Raw comment text.

    Returns:
        The Command, or None if the body is empty or does not start with "/".

    Example:
        >>> parse_command("/ok-to-perf  --duration 5m")
        Command(name='/ok-to-perf', args='--duration 5m')
    """
    body = (comment_body or "").strip()
    if not body.startswith(COMMAND_PREFIX):
        return None

    tokens = body.split()
    return Command(name=tokens[0], args=" ".join(tokens[1:]))


def lookup_command(command: Command) -> Optional[CommandSpec]:
    """Return the CommandSpec for a command, or None if it is unknown."""
    return COMMANDS.get(command.name)
