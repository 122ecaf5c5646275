"""GitHub API data models used by the bot.

Source:
- src/repobot/github/client.py (GitHubClient)
- src/repobot/webhook/models.py (IssueRef)
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.repobot.webhook.models import IssueRef


class PullRequestHead(BaseModel):
    """Head commit information of a pull request.

    Attributes:
        number: The pull request number.
        head_sha: SHA of the head commit.
        head_repo_full_name: "owner/name" of the head repository, None when
            the fork has been deleted.
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., gt=0)
    head_sha: str = Field(..., min_length=1)
    head_repo_full_name: Optional[str] = None

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "PullRequestHead":
        """Build from a `GET /repos/{owner}/{repo}/pulls/{number}` response."""
        head = data.get("head") or {}
        head_repo = head.get("repo") or {}
        return cls(
            number=data["number"],
            head_sha=head["sha"],
            head_repo_full_name=head_repo.get("full_name"),
        )


class WorkflowRun(BaseModel):
    """A single GitHub Actions workflow run."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "WorkflowRun":
        return cls(id=data["id"], name=data.get("name") or "")


class DispatchPayload(BaseModel):
    """Client payload of a repository_dispatch event.

    `args` and `previous_version` are optional per command: only fields that
    were explicitly given at construction end up in the serialized payload,
    so `/ok-to-test` carries no `args` key while `/test-version-skew` without
    a version carries `"previous_version": null`.

    Attributes:
        pull_head_ref: SHA of the pull request head commit.
        pull_head_repo: Full name of the pull request head repository.
        command: Command name without the leading slash.
        args: Free-form arguments following the command.
        previous_version: Version to test against (version skew only).
        issue: The pull request the command was issued on.
    """

    model_config = ConfigDict(frozen=True)

    pull_head_ref: str
    pull_head_repo: Optional[str]
    command: str
    args: Optional[str] = None
    previous_version: Optional[str] = None
    issue: IssueRef

    def to_client_payload(self) -> Dict[str, Any]:
        """Serialize for the dispatches API, omitting unset optional fields."""
        payload = self.model_dump(
            exclude_unset=True,
            exclude={"issue"},
        )
        payload["issue"] = self.issue.to_payload()
        return payload
