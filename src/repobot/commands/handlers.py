"""Command handlers for the bot.

Each handler follows the same shape: guard clause, pull request lookup when
the command needs one, payload construction, and a single outbound action
through the RepoClient. Guard failures are silent no-ops that are only
logged; they never produce user-visible output.

The two multi-step handlers (SDK issue fanout and failed-run re-trigger)
attempt every step even if an earlier one fails and raise FanoutError at the
end. Steps that succeeded are never undone.

Source:
- src/repobot/github/client.py (RepoClient)
- src/repobot/commands/models.py (Command, CommandSpec)
- src/repobot/commands/formatting.py (comment and issue templates)
"""

import logging
from typing import List, Optional, Sequence, Tuple

from src.repobot.commands.formatting import (
    DOCS_ISSUE_LABELS,
    SDK_ISSUE_LABELS,
    format_docs_issue_body,
    format_docs_issue_title,
    format_joke,
    format_not_allowed_comment,
    format_sdk_issue_body,
    format_sdk_issue_title,
)
from src.repobot.commands.models import Command, CommandAction, CommandSpec
from src.repobot.config import DEFAULT_SDK_REPOSITORIES, BotSettings
from src.repobot.github.client import RepoClient
from src.repobot.github.models import DispatchPayload, PullRequestHead
from src.repobot.webhook.models import IssueRef


logger = logging.getLogger(__name__)


class FanoutError(Exception):
    """Raised when some steps of a multi-step action failed.

    Attributes:
        action: Name of the multi-step action.
        failures: (target, exception) pairs for every failed step.
        succeeded: Targets whose step completed.
    """

    def __init__(
        self,
        action: str,
        failures: List[Tuple[str, Exception]],
        succeeded: List[str],
    ):
        self.action = action
        self.failures = failures
        self.succeeded = succeeded
        targets = ", ".join(target for target, _ in failures)
        super().__init__(
            f"{action}: {len(failures)} of {len(failures) + len(succeeded)} "
            f"steps failed ({targets})"
        )


class CommandHandlers:
    """Executes bot commands and label actions against a RepoClient.

    Attributes:
        github_client: Repository operations implementation.
        joke_url: Endpoint of the joke service used by /make-me-laugh.
        bot_label: Label marking issues created by the bot.
        bot_workflow_url: Link to the bot workflow, used in issue bodies.
        docs_owner: Owner of the docs repository.
        docs_repository: Repository that receives docs-needed issues.
        sdk_owner: Owner of the SDK repositories.
        sdk_repositories: Ordered SDK repositories receiving sdk-needed issues.
    """

    def __init__(
        self,
        github_client: RepoClient,
        joke_url: str = "https://official-joke-api.appspot.com/random_joke",
        bot_label: str = "created-by/dapr-bot",
        bot_workflow_url: str = "",
        docs_owner: str = "dapr",
        docs_repository: str = "docs",
        sdk_owner: str = "dapr",
        sdk_repositories: Sequence[str] = DEFAULT_SDK_REPOSITORIES,
    ):
        self.github_client = github_client
        self.joke_url = joke_url
        self.bot_label = bot_label
        self.bot_workflow_url = bot_workflow_url
        self.docs_owner = docs_owner
        self.docs_repository = docs_repository
        self.sdk_owner = sdk_owner
        self.sdk_repositories = tuple(sdk_repositories)

    @classmethod
    def from_settings(
        cls, github_client: RepoClient, settings: BotSettings
    ) -> "CommandHandlers":
        """Build handlers configured from BotSettings."""
        return cls(
            github_client=github_client,
            joke_url=settings.joke_url,
            bot_label=settings.bot_label,
            bot_workflow_url=settings.bot_workflow_url,
            docs_owner=settings.docs_owner,
            docs_repository=settings.docs_repository,
            sdk_owner=settings.upstream_owner,
            sdk_repositories=settings.sdk_repositories,
        )

    # ============================================================
    # Commands
    # ============================================================

    async def run(
        self,
        spec: CommandSpec,
        command: Command,
        issue: IssueRef,
        actor: str,
        is_pull_request: bool,
    ) -> None:
        """Run a known command.

        Args:
            spec: Dispatch table entry of the command.
            command: The parsed command with its raw args.
            issue: Issue or pull request the command was posted on.
            actor: Login of the commenter.
            is_pull_request: Whether the comment was posted on a pull request.
        """
        if spec.requires_pull_request and not is_pull_request:
            logger.info(
                "[%s] only pull requests supported, skipping command execution.",
                command.bare_name,
            )
            return

        if spec.action == CommandAction.ASSIGN:
            await self.assign(issue, actor, is_pull_request)
        elif spec.action == CommandAction.RETEST_FAILED:
            await self.retest_failed(issue)
        elif spec.action == CommandAction.MAKE_ME_LAUGH:
            await self.make_me_laugh(issue)
        elif spec.action == CommandAction.DISPATCH:
            await self.trigger_dispatch(spec, command, issue)

    async def assign(self, issue: IssueRef, actor: str, is_pull_request: bool) -> None:
        """Assign the commenter to an unassigned issue."""
        if is_pull_request:
            logger.info("[assign] pull requests unsupported, skipping command execution.")
            return
        if issue.assignees:
            logger.info(
                "[assign] issue already has assignees, skipping command execution.",
                extra={"issue_id": issue.issue_id, "assignees": sorted(issue.assignees)},
            )
            return

        await self.github_client.add_assignees(
            owner=issue.owner,
            repo=issue.repo,
            issue_number=issue.number,
            assignees=[actor.lower()],
        )
        logger.info("[assign] assigned %s to %s", actor.lower(), issue.issue_id)

    async def retest_failed(self, issue: IssueRef) -> None:
        """Re-run the failed jobs of every failed workflow run of the PR head.

        Raises:
            FanoutError: If re-running one or more workflow runs failed.
        """
        pull = await self._get_pull_request(issue, "retest-failed")
        if pull is None:
            return

        runs = await self.github_client.list_failed_workflow_runs(
            owner=issue.owner,
            repo=issue.repo,
            head_sha=pull.head_sha,
        )
        if not runs:
            logger.info(
                "[retest-failed] no failed workflow found, skipping command execution."
            )
            return

        logger.info(
            "[retest-failed] found %d failed workflows, triggering re-run.", len(runs)
        )

        failures: List[Tuple[str, Exception]] = []
        succeeded: List[str] = []
        for run in runs:
            target = f"run {run.id} ({run.name})"
            logger.info("[retest-failed] re-running workflow %s", target)
            try:
                await self.github_client.rerun_failed_jobs(
                    owner=issue.owner,
                    repo=issue.repo,
                    run_id=run.id,
                )
            except Exception as e:
                logger.exception("[retest-failed] re-running workflow %s failed", target)
                failures.append((target, e))
            else:
                succeeded.append(target)

        if failures:
            raise FanoutError("retest-failed", failures, succeeded)

    async def make_me_laugh(self, issue: IssueRef) -> None:
        """Post a random joke as a comment."""
        joke = await self.github_client.fetch_external_joke(self.joke_url)
        await self.github_client.create_comment(
            owner=issue.owner,
            repo=issue.repo,
            issue_number=issue.number,
            body=format_joke(joke),
        )

    async def trigger_dispatch(
        self,
        spec: CommandSpec,
        command: Command,
        issue: IssueRef,
    ) -> None:
        """Fire the repository_dispatch event of a CI-triggering command.

        The payload carries the pull request head SHA and repository so the
        triggered workflow can check out the contributor's code.
        """
        log_name = command.bare_name
        pull = await self._get_pull_request(issue, log_name)
        if pull is None:
            return

        payload = self.build_dispatch_payload(spec, command, issue, pull)
        client_payload = payload.to_client_payload()

        await self.github_client.create_dispatch_event(
            owner=issue.owner,
            repo=issue.repo,
            event_type=spec.event_type,
            client_payload=client_payload,
        )
        logger.info("[%s] triggered %s for %s", log_name, spec.event_type, client_payload)

    @staticmethod
    def build_dispatch_payload(
        spec: CommandSpec,
        command: Command,
        issue: IssueRef,
        pull: PullRequestHead,
    ) -> DispatchPayload:
        """Build the dispatch payload for a command according to its spec.

        Example:
            "/test-version-skew v1.2.3 extra args" yields
            previous_version="v1.2.3" and args="extra args".
        """
        fields = {
            "pull_head_ref": pull.head_sha,
            "pull_head_repo": pull.head_repo_full_name,
            "command": spec.payload_command,
            "issue": issue,
        }
        if spec.takes_previous_version:
            previous_version, args = command.split_first_arg()
            fields["previous_version"] = previous_version
            fields["args"] = args
        elif spec.includes_args:
            fields["args"] = command.args
        return DispatchPayload(**fields)

    async def comment_not_allowed(self, issue: IssueRef, actor: str) -> None:
        """Tell a user they may not run the command they tried."""
        await self.github_client.create_comment(
            owner=issue.owner,
            repo=issue.repo,
            issue_number=issue.number,
            body=format_not_allowed_comment(actor),
        )

    # ============================================================
    # Label actions
    # ============================================================

    async def create_docs_issue(self, issue: IssueRef) -> None:
        """Open one issue in the docs repository for a docs-needed label."""
        await self.github_client.create_issue(
            owner=self.docs_owner,
            repo=self.docs_repository,
            title=format_docs_issue_title(issue),
            labels=[*DOCS_ISSUE_LABELS, self.bot_label],
            body=format_docs_issue_body(issue, self.bot_workflow_url),
        )

    async def create_sdk_issues(self, issue: IssueRef) -> None:
        """Open one issue in every SDK repository, in registry order.

        Raises:
            FanoutError: If creating one or more of the issues failed.
        """
        failures: List[Tuple[str, Exception]] = []
        succeeded: List[str] = []
        for sdk in self.sdk_repositories:
            target = f"{self.sdk_owner}/{sdk}"
            try:
                await self.github_client.create_issue(
                    owner=self.sdk_owner,
                    repo=sdk,
                    title=format_sdk_issue_title(issue),
                    labels=[*SDK_ISSUE_LABELS, self.bot_label],
                    body=format_sdk_issue_body(issue, self.bot_workflow_url),
                )
            except Exception as e:
                logger.exception("[sdk-needed] creating issue in %s failed", target)
                failures.append((target, e))
            else:
                succeeded.append(target)

        if failures:
            raise FanoutError("sdk-needed", failures, succeeded)

    async def _get_pull_request(
        self, issue: IssueRef, log_name: str
    ) -> Optional[PullRequestHead]:
        pull = await self.github_client.get_pull_request(
            owner=issue.owner,
            repo=issue.repo,
            number=issue.number,
        )
        if pull is None:
            logger.info(
                "[%s] pull request not found for %s, skipping command execution.",
                log_name,
                issue.issue_id,
            )
        return pull
