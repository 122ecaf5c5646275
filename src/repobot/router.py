"""Command router connecting webhook events to command handlers.

Receives one normalized event per process and takes exactly one handling
path:

- CommentCreatedEvent: parse a slash-command, check the allowlist for
  privileged commands, and run the matching handler
- IssueLabeledEvent: open follow-up issues for docs-needed / sdk-needed

Anything that is not actionable (plain comments, unknown commands, other
labels, label events in forks) is logged and ignored. The router performs no
I/O itself; every side effect goes through CommandHandlers.

Source:
- src/repobot/webhook/models.py (CommentCreatedEvent, IssueLabeledEvent)
- src/repobot/commands/models.py (parse_command, COMMANDS)
- src/repobot/commands/handlers.py (CommandHandlers)
"""

import logging
from typing import FrozenSet, Iterable

from src.repobot.commands.formatting import DOCS_NEEDED_LABEL, SDK_NEEDED_LABEL
from src.repobot.commands.handlers import CommandHandlers
from src.repobot.commands.models import lookup_command, parse_command
from src.repobot.config import BotSettings
from src.repobot.webhook.models import BotEvent, CommentCreatedEvent, IssueLabeledEvent

logger = logging.getLogger(__name__)


class CommandRouter:
    """Routes a bot event to its handler.

    Attributes:
        handlers: Executes commands and label actions.
        allowlist: Lower-cased logins allowed to run privileged commands.
        upstream_owner: Label events are ignored in repositories owned by
            anyone else (forks).
    """

    def __init__(
        self,
        handlers: CommandHandlers,
        allowlist: Iterable[str],
        upstream_owner: str = "dapr",
    ):
        self.handlers = handlers
        self.allowlist: FrozenSet[str] = frozenset(name.lower() for name in allowlist)
        self.upstream_owner = upstream_owner

    @classmethod
    def from_settings(cls, handlers: CommandHandlers, settings: BotSettings) -> "CommandRouter":
        return cls(
            handlers=handlers,
            allowlist=settings.allowlist,
            upstream_owner=settings.upstream_owner,
        )

    def is_allowed(self, actor: str) -> bool:
        return actor.lower() in self.allowlist

    async def handle(self, event: BotEvent) -> None:
        """Handle a single bot event.

        Args:
            event: The normalized webhook event.

        Raises:
            GitHubAPIError: If a GitHub call fails.
            FanoutError: If a multi-step action partially failed.
        """
        if isinstance(event, CommentCreatedEvent):
            await self.handle_comment(event)
        elif isinstance(event, IssueLabeledEvent):
            await self.handle_labeled(event)
        else:
            logger.info("[router] event %s not supported, exiting.", type(event).__name__)

    async def handle_comment(self, event: CommentCreatedEvent) -> None:
        """Parse and run the slash-command in a new comment."""
        command = parse_command(event.comment_body)
        if command is None:
            logger.debug("[router] comment is not a command, exiting.")
            return

        logger.info(
            "[router] command %s from %s on %s",
            command.name,
            event.actor_name,
            event.issue.issue_id,
        )

        spec = lookup_command(command)
        if spec is None:
            logger.info("[router] command %s not found, exiting.", command.name)
            return

        if spec.privileged and not self.is_allowed(event.actor_name):
            logger.info(
                "[router] user %s is not allowed to run %s, exiting.",
                event.actor_name.lower(),
                command.name,
            )
            await self.handlers.comment_not_allowed(event.issue, event.actor_name.lower())
            return

        await self.handlers.run(
            spec=spec,
            command=command,
            issue=event.issue,
            actor=event.actor_name,
            is_pull_request=event.is_pull_request,
        )

    async def handle_labeled(self, event: IssueLabeledEvent) -> None:
        """Open follow-up issues for docs-needed and sdk-needed labels.

        Label events need no allowlist check: only users with triage access
        can label issues.
        """
        if event.issue.owner != self.upstream_owner:
            logger.info(
                "[router] not running in a %s repository, exiting.", self.upstream_owner
            )
            return

        if event.label_name == DOCS_NEEDED_LABEL:
            await self.handlers.create_docs_issue(event.issue)
        elif event.label_name == SDK_NEEDED_LABEL:
            await self.handlers.create_sdk_issues(event.issue)
        else:
            logger.info("[router] label %s not supported, exiting.", event.label_name)
