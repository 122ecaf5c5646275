"""GitHub API client for the bot's repository actions.

This module provides the RepoClient protocol consumed by the command
handlers and an async httpx implementation of it for:
- Looking up pull request heads
- Listing and re-running failed workflow runs
- Adding assignees and creating comments
- Firing repository_dispatch events
- Creating issues
- Fetching a joke from a public joke service

Requests are made exactly once. Failed responses raise GitHubAPIError (or
RateLimitError when GitHub reports an exhausted rate limit) and are left to
propagate to the caller.

Source:
- src/repobot/github/models.py (PullRequestHead, WorkflowRun)
- src/repobot/config.py (github_token, github_base_url, http_timeout_seconds)
"""

import logging
import time
from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx

from src.repobot.github.models import PullRequestHead, WorkflowRun


logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response.
        response_body: Response body from GitHub API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class RateLimitError(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded.

    Attributes:
        reset_at: Unix timestamp when the rate limit resets.
        retry_after: Seconds to wait before retrying.
    """

    def __init__(
        self,
        message: str,
        reset_at: Optional[int] = None,
        retry_after: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.reset_at = reset_at
        self.retry_after = retry_after


class RepoClient(Protocol):
    """Repository operations the command handlers depend on."""

    async def get_pull_request(
        self, owner: str, repo: str, number: int
    ) -> Optional[PullRequestHead]: ...

    async def list_failed_workflow_runs(
        self, owner: str, repo: str, head_sha: str
    ) -> List[WorkflowRun]: ...

    async def rerun_failed_jobs(self, owner: str, repo: str, run_id: int) -> None: ...

    async def add_assignees(
        self, owner: str, repo: str, issue_number: int, assignees: Sequence[str]
    ) -> Dict[str, Any]: ...

    async def create_comment(
        self, owner: str, repo: str, issue_number: int, body: str
    ) -> Dict[str, Any]: ...

    async def create_dispatch_event(
        self, owner: str, repo: str, event_type: str, client_payload: Dict[str, Any]
    ) -> None: ...

    async def create_issue(
        self, owner: str, repo: str, title: str, labels: Sequence[str], body: str
    ) -> Dict[str, Any]: ...

    async def fetch_external_joke(self, url: str) -> Optional[Dict[str, Any]]: ...


class GitHubClient:
    """Async GitHub API client implementing RepoClient.

    Attributes:
        token: GitHub API token (PAT, GITHUB_TOKEN or GitHub App token).
        base_url: Base URL for GitHub API (default: https://api.github.com).
        timeout: Request timeout in seconds.

    Example:
        >>> client = GitHubClient(token="ghp_xxx")
        >>> async with client:
        ...     await client.create_comment("owner", "repo", 123, "Hello!")
    """

    WORKFLOW_RUNS_PER_PAGE = 100

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub API token for authentication.
            base_url: Base URL for GitHub API. Use this to support
                      GitHub Enterprise Server endpoints.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._public_client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the authenticated GitHub HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    @property
    def public_client(self) -> httpx.AsyncClient:
        """Get the unauthenticated client used for third-party services.

        Kept separate so the GitHub token is never sent outside GitHub.
        """
        if self._public_client is None or self._public_client.is_closed:
            self._public_client = httpx.AsyncClient(
                headers={"User-Agent": "repobot/1.0", "Accept": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._public_client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "repobot/1.0",
        }

    async def close(self) -> None:
        """Close the HTTP clients and release resources."""
        for client in (self._client, self._public_client):
            if client is not None and not client.is_closed:
                await client.aclose()
        self._client = None
        self._public_client = None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _parse_int_header(self, headers: httpx.Headers, name: str) -> Optional[int]:
        value = headers.get(name)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                pass
        return None

    def _raise_rate_limit(self, response: httpx.Response) -> None:
        """Raise RateLimitError with the reset information from the response.

        Raises:
            RateLimitError: Always.
        """
        reset_at = self._parse_int_header(response.headers, "x-ratelimit-reset")

        retry_after = None
        if reset_at is not None:
            retry_after = max(0, reset_at - int(time.time()))

        retry_after_header = self._parse_int_header(response.headers, "retry-after")
        if retry_after_header is not None:
            retry_after = retry_after_header

        logger.warning(
            "GitHub API rate limit exceeded",
            extra={"reset_at": reset_at, "retry_after": retry_after},
        )

        raise RateLimitError(
            message="GitHub API rate limit exceeded",
            status_code=response.status_code,
            response_body=response.text,
            request_url=str(response.url),
            reset_at=reset_at,
            retry_after=retry_after,
        )

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make a single HTTP request to the GitHub API.

        Args:
            method: HTTP method (GET, POST, ...).
            path: API path (e.g., /repos/owner/repo/issues/1/comments).
            json_data: Optional JSON body for the request.
            params: Optional query parameters.

        Returns:
            The HTTP response from GitHub.

        Raises:
            GitHubAPIError: If GitHub answers with an error status.
            RateLimitError: If rate limit is exceeded.
            httpx.RequestError: On network failures.
        """
        response = await self.client.request(
            method=method,
            url=path,
            json=json_data,
            params=params,
        )

        if response.status_code == 403:
            remaining = self._parse_int_header(response.headers, "x-ratelimit-remaining")
            if remaining == 0:
                self._raise_rate_limit(response)

        if response.status_code == 429:
            self._raise_rate_limit(response)

        if response.status_code >= 400:
            error_body = response.text
            logger.error(
                "GitHub API error",
                extra={
                    "status_code": response.status_code,
                    "path": path,
                    "method": method,
                    "response_body": error_body[:500],
                },
            )
            raise GitHubAPIError(
                message=f"GitHub API error: {response.status_code} {method} {path}",
                status_code=response.status_code,
                response_body=error_body,
                request_url=str(response.url),
            )

        return response

    async def get_pull_request(
        self,
        owner: str,
        repo: str,
        number: int,
    ) -> Optional[PullRequestHead]:
        """Get the head of a pull request.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            number: Pull request number.

        Returns:
            PullRequestHead, or None if the pull request does not exist.

        Raises:
            GitHubAPIError: If the request fails with anything but 404.
        """
        path = f"/repos/{owner}/{repo}/pulls/{number}"

        logger.debug(
            "Getting pull request",
            extra={"owner": owner, "repo": repo, "pr_number": number},
        )

        try:
            response = await self._request(method="GET", path=path)
        except GitHubAPIError as e:
            if e.status_code == 404:
                logger.info(
                    "Pull request not found",
                    extra={"owner": owner, "repo": repo, "pr_number": number},
                )
                return None
            raise

        data = response.json()
        if not data:
            return None
        return PullRequestHead.from_github_response(data)

    async def list_failed_workflow_runs(
        self,
        owner: str,
        repo: str,
        head_sha: str,
    ) -> List[WorkflowRun]:
        """List failed pull_request workflow runs for a commit.

        Only runs triggered by the `pull_request` event with status
        `failure` are returned. Pages are followed through the `Link`
        header until GitHub reports no next page.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            head_sha: Commit SHA the runs were triggered for.

        Returns:
            Failed workflow runs in the order GitHub lists them.
        """
        path: Optional[str] = f"/repos/{owner}/{repo}/actions/runs"
        params: Optional[Dict[str, Any]] = {
            "head_sha": head_sha,
            "event": "pull_request",
            "status": "failure",
            "per_page": self.WORKFLOW_RUNS_PER_PAGE,
        }

        runs: List[WorkflowRun] = []
        total_count = 0
        while path:
            response = await self._request(method="GET", path=path, params=params)
            data = response.json()
            total_count = data.get("total_count", total_count)
            runs.extend(
                WorkflowRun.from_github_response(run)
                for run in data.get("workflow_runs", [])
            )

            # The next link already carries the query string.
            path = response.links.get("next", {}).get("url")
            params = None

        logger.info(
            "Listed failed workflow runs",
            extra={
                "owner": owner,
                "repo": repo,
                "head_sha": head_sha,
                "total_count": total_count,
                "fetched": len(runs),
            },
        )

        return runs

    async def rerun_failed_jobs(self, owner: str, repo: str, run_id: int) -> None:
        """Re-run the failed jobs of a workflow run.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            run_id: Workflow run id.
        """
        path = f"/repos/{owner}/{repo}/actions/runs/{run_id}/rerun-failed-jobs"

        logger.info(
            "Re-running failed jobs",
            extra={"owner": owner, "repo": repo, "run_id": run_id},
        )

        await self._request(method="POST", path=path)

    async def add_assignees(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        assignees: Sequence[str],
    ) -> Dict[str, Any]:
        """Add assignees to an issue.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            issue_number: Issue number.
            assignees: Logins to assign.

        Returns:
            The updated issue data from GitHub API.
        """
        path = f"/repos/{owner}/{repo}/issues/{issue_number}/assignees"

        logger.info(
            "Adding assignees to issue",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "assignees": list(assignees),
            },
        )

        response = await self._request(
            method="POST",
            path=path,
            json_data={"assignees": list(assignees)},
        )
        return response.json()

    async def create_comment(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        body: str,
    ) -> Dict[str, Any]:
        """Create a comment on an issue.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            issue_number: Issue number to comment on.
            body: Comment body in markdown format.

        Returns:
            The created comment data from GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{owner}/{repo}/issues/{issue_number}/comments"

        logger.info(
            "Creating comment on issue",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "body_length": len(body),
            },
        )

        response = await self._request(
            method="POST",
            path=path,
            json_data={"body": body},
        )

        result = response.json()
        logger.info(
            "Comment created successfully",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "comment_id": result.get("id"),
            },
        )

        return result

    async def create_dispatch_event(
        self,
        owner: str,
        repo: str,
        event_type: str,
        client_payload: Dict[str, Any],
    ) -> None:
        """Fire a repository_dispatch event.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            event_type: Dispatch event type the CI workflows listen for.
            client_payload: JSON payload handed to the triggered workflows.
        """
        path = f"/repos/{owner}/{repo}/dispatches"

        logger.info(
            "Creating repository dispatch event",
            extra={"owner": owner, "repo": repo, "event_type": event_type},
        )

        await self._request(
            method="POST",
            path=path,
            json_data={"event_type": event_type, "client_payload": client_payload},
        )

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        labels: Sequence[str],
        body: str,
    ) -> Dict[str, Any]:
        """Create an issue.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            title: Issue title.
            labels: Label names to apply.
            body: Issue body in markdown format.

        Returns:
            The created issue data from GitHub API.
        """
        path = f"/repos/{owner}/{repo}/issues"

        logger.info(
            "Creating issue",
            extra={"owner": owner, "repo": repo, "title": title},
        )

        response = await self._request(
            method="POST",
            path=path,
            json_data={"title": title, "labels": list(labels), "body": body},
        )

        result = response.json()
        logger.info(
            "Issue created successfully",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": result.get("number"),
            },
        )
        return result

    async def fetch_external_joke(self, url: str) -> Optional[Dict[str, Any]]:
        """Fetch a joke from a public joke service.

        The request is made without GitHub credentials.

        Args:
            url: Joke service endpoint returning a JSON object.

        Returns:
            The decoded JSON object, or None when the body is not a JSON
            object.

        Raises:
            httpx.HTTPStatusError: If the service answers with an error status.
        """
        response = await self.public_client.get(url)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError:
            logger.warning("Joke service returned a non-JSON body", extra={"url": url})
            return None

        return data if isinstance(data, dict) else None
