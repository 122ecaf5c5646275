"""GitHub API client for the bot's repository actions.

This module provides a wrapper around the GitHub API for:
- Pull request lookup and workflow run re-triggering
- Comments, assignees and issue creation
- repository_dispatch events
"""

from src.repobot.github.client import (
    GitHubAPIError,
    GitHubClient,
    RateLimitError,
    RepoClient,
)
from src.repobot.github.models import DispatchPayload, PullRequestHead, WorkflowRun

__all__ = [
    "DispatchPayload",
    "GitHubAPIError",
    "GitHubClient",
    "PullRequestHead",
    "RateLimitError",
    "RepoClient",
    "WorkflowRun",
]
