"""Normalized webhook event models for the bot.

The router only ever sees one of two event shapes, built once per process
from the GitHub webhook payload and never modified afterwards:

- CommentCreatedEvent: a comment was created on an issue or pull request
- IssueLabeledEvent: a label was added to an issue

The models use Pydantic for validation, consistent with config.py.
"""

from typing import FrozenSet, Union

from pydantic import BaseModel, ConfigDict, Field


class IssueRef(BaseModel):
    """Reference to the issue or pull request an event targets.

    Mirrored from the webhook payload; the bot does not own this data.

    Attributes:
        owner: The repository owner (user or organization).
        repo: The repository name without owner prefix.
        number: The issue or pull request number.
        assignees: Logins currently assigned to the issue.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., min_length=1, description="Repository owner")
    repo: str = Field(..., min_length=1, description="Repository name")
    number: int = Field(..., gt=0, description="Issue or pull request number")
    assignees: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Logins currently assigned to the issue",
    )

    @property
    def issue_id(self) -> str:
        """Canonical identifier in format "{owner}/{repo}#{number}"."""
        return f"{self.owner}/{self.repo}#{self.number}"

    def to_payload(self) -> dict:
        """Serialize the reference for a repository_dispatch client payload."""
        return {"owner": self.owner, "repo": self.repo, "number": self.number}


class CommentCreatedEvent(BaseModel):
    """A comment was created on an issue or pull request.

    Attributes:
        issue: The commented issue.
        comment_body: The trimmed comment text (may be empty).
        actor_name: Login of the user who wrote the comment.
        is_pull_request: True when the issue is a pull request.
    """

    model_config = ConfigDict(frozen=True)

    issue: IssueRef
    comment_body: str = ""
    actor_name: str = Field(..., min_length=1)
    is_pull_request: bool = False


class IssueLabeledEvent(BaseModel):
    """A label was added to an issue.

    Attributes:
        issue: The labeled issue.
        label_name: Name of the label that was added.
    """

    model_config = ConfigDict(frozen=True)

    issue: IssueRef
    label_name: str = Field(..., min_length=1)


BotEvent = Union[CommentCreatedEvent, IssueLabeledEvent]
