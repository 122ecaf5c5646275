"""Unit tests for GitHubClient request building and error handling.

Requests are served by an httpx.MockTransport so no network is used.
"""

import asyncio
import json
from typing import Callable, List

import httpx
import pytest

from src.repobot.github.client import GitHubAPIError, GitHubClient, RateLimitError
from src.repobot.github.models import PullRequestHead, WorkflowRun


def run_async(coro):
    return asyncio.run(coro)


def _make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    requests: List[httpx.Request],
) -> GitHubClient:
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return GitHubClient(
        token="ghp_test",
        base_url="https://api.github.com",
        transport=httpx.MockTransport(record),
    )


def _call(client: GitHubClient, method: str, *args, **kwargs):
    async def go():
        async with client:
            return await getattr(client, method)(*args, **kwargs)

    return run_async(go())


class TestPullRequests:
    def test_get_pull_request(self):
        requests: List[httpx.Request] = []
        client = _make_client(
            lambda r: httpx.Response(
                200,
                json={
                    "number": 42,
                    "head": {"sha": "abc123", "repo": {"full_name": "contributor/dapr"}},
                },
            ),
            requests,
        )

        pull = _call(client, "get_pull_request", "dapr", "dapr", 42)

        assert pull == PullRequestHead(
            number=42, head_sha="abc123", head_repo_full_name="contributor/dapr"
        )
        assert requests[0].method == "GET"
        assert requests[0].url.path == "/repos/dapr/dapr/pulls/42"
        assert requests[0].headers["Authorization"] == "Bearer ghp_test"
        assert requests[0].headers["Accept"] == "application/vnd.github+json"

    def test_deleted_head_repository(self):
        client = _make_client(
            lambda r: httpx.Response(
                200, json={"number": 42, "head": {"sha": "abc123", "repo": None}}
            ),
            [],
        )

        pull = _call(client, "get_pull_request", "dapr", "dapr", 42)

        assert pull.head_repo_full_name is None

    def test_missing_pull_request_returns_none(self):
        client = _make_client(lambda r: httpx.Response(404, json={"message": "Not Found"}), [])

        assert _call(client, "get_pull_request", "dapr", "dapr", 42) is None

    def test_server_error_propagates(self):
        client = _make_client(lambda r: httpx.Response(502, text="bad gateway"), [])

        with pytest.raises(GitHubAPIError) as exc_info:
            _call(client, "get_pull_request", "dapr", "dapr", 42)

        assert exc_info.value.status_code == 502
        assert exc_info.value.response_body == "bad gateway"


class TestWorkflowRuns:
    def test_list_failed_workflow_runs(self):
        requests: List[httpx.Request] = []
        client = _make_client(
            lambda r: httpx.Response(
                200,
                json={
                    "total_count": 2,
                    "workflow_runs": [{"id": 1, "name": "dapr"}, {"id": 2, "name": "e2e"}],
                },
            ),
            requests,
        )

        runs = _call(client, "list_failed_workflow_runs", "dapr", "dapr", "abc123")

        assert runs == [WorkflowRun(id=1, name="dapr"), WorkflowRun(id=2, name="e2e")]
        params = requests[0].url.params
        assert requests[0].url.path == "/repos/dapr/dapr/actions/runs"
        assert params["head_sha"] == "abc123"
        assert params["event"] == "pull_request"
        assert params["status"] == "failure"

    def test_follows_next_page_links(self):
        next_url = (
            "https://api.github.com/repos/dapr/dapr/actions/runs"
            "?head_sha=abc123&event=pull_request&status=failure&per_page=100&page=2"
        )

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("page") == "2":
                return httpx.Response(
                    200,
                    json={"total_count": 3, "workflow_runs": [{"id": 3, "name": "lint"}]},
                )
            return httpx.Response(
                200,
                headers={"Link": f'<{next_url}>; rel="next", <{next_url}>; rel="last"'},
                json={
                    "total_count": 3,
                    "workflow_runs": [{"id": 1, "name": "dapr"}, {"id": 2, "name": "e2e"}],
                },
            )

        requests: List[httpx.Request] = []
        client = _make_client(handler, requests)

        runs = _call(client, "list_failed_workflow_runs", "dapr", "dapr", "abc123")

        assert [run.id for run in runs] == [1, 2, 3]
        assert len(requests) == 2
        assert requests[1].url.params["head_sha"] == "abc123"
        assert requests[1].headers["Authorization"] == "Bearer ghp_test"

    def test_rerun_failed_jobs(self):
        requests: List[httpx.Request] = []
        client = _make_client(lambda r: httpx.Response(201), requests)

        _call(client, "rerun_failed_jobs", "dapr", "dapr", 99)

        assert requests[0].method == "POST"
        assert requests[0].url.path == "/repos/dapr/dapr/actions/runs/99/rerun-failed-jobs"


class TestIssueOperations:
    def test_add_assignees(self):
        requests: List[httpx.Request] = []
        client = _make_client(lambda r: httpx.Response(201, json={"number": 7}), requests)

        _call(client, "add_assignees", "dapr", "dapr", 7, ["alice"])

        assert requests[0].url.path == "/repos/dapr/dapr/issues/7/assignees"
        assert json.loads(requests[0].content) == {"assignees": ["alice"]}

    def test_create_comment(self):
        requests: List[httpx.Request] = []
        client = _make_client(lambda r: httpx.Response(201, json={"id": 5}), requests)

        result = _call(client, "create_comment", "dapr", "dapr", 7, "hello")

        assert result == {"id": 5}
        assert requests[0].url.path == "/repos/dapr/dapr/issues/7/comments"
        assert json.loads(requests[0].content) == {"body": "hello"}

    def test_create_issue(self):
        requests: List[httpx.Request] = []
        client = _make_client(lambda r: httpx.Response(201, json={"number": 100}), requests)

        _call(client, "create_issue", "dapr", "docs", "Title", ("a", "b"), "Body")

        assert requests[0].url.path == "/repos/dapr/docs/issues"
        assert json.loads(requests[0].content) == {
            "title": "Title",
            "labels": ["a", "b"],
            "body": "Body",
        }

    def test_create_dispatch_event(self):
        requests: List[httpx.Request] = []
        client = _make_client(lambda r: httpx.Response(204), requests)

        _call(client, "create_dispatch_event", "dapr", "dapr", "e2e-test", {"command": "ok-to-test"})

        assert requests[0].url.path == "/repos/dapr/dapr/dispatches"
        assert json.loads(requests[0].content) == {
            "event_type": "e2e-test",
            "client_payload": {"command": "ok-to-test"},
        }


class TestRateLimits:
    def test_exhausted_rate_limit(self):
        client = _make_client(
            lambda r: httpx.Response(
                403,
                headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "0"},
                json={"message": "API rate limit exceeded"},
            ),
            [],
        )

        with pytest.raises(RateLimitError) as exc_info:
            _call(client, "create_comment", "dapr", "dapr", 7, "hello")

        assert exc_info.value.reset_at == 0
        assert exc_info.value.retry_after == 0

    def test_too_many_requests_with_retry_after(self):
        client = _make_client(
            lambda r: httpx.Response(429, headers={"retry-after": "30"}),
            [],
        )

        with pytest.raises(RateLimitError) as exc_info:
            _call(client, "create_issue", "dapr", "docs", "t", [], "b")

        assert exc_info.value.retry_after == 30

    def test_plain_forbidden_is_api_error(self):
        client = _make_client(
            lambda r: httpx.Response(
                403, headers={"x-ratelimit-remaining": "10"}, json={"message": "Forbidden"}
            ),
            [],
        )

        with pytest.raises(GitHubAPIError) as exc_info:
            _call(client, "create_comment", "dapr", "dapr", 7, "hello")

        assert not isinstance(exc_info.value, RateLimitError)
        assert exc_info.value.status_code == 403


class TestExternalJoke:
    def test_fetch_joke_without_credentials(self):
        requests: List[httpx.Request] = []
        client = _make_client(
            lambda r: httpx.Response(200, json={"setup": "s", "punchline": "p"}),
            requests,
        )

        joke = _call(client, "fetch_external_joke", "https://jokes.example.com/random_joke")

        assert joke == {"setup": "s", "punchline": "p"}
        assert requests[0].url.host == "jokes.example.com"
        assert "Authorization" not in requests[0].headers

    @pytest.mark.parametrize("content", [b"<html>oops</html>", b"[1, 2]"])
    def test_malformed_joke_body(self, content):
        client = _make_client(lambda r: httpx.Response(200, content=content), [])

        assert _call(client, "fetch_external_joke", "https://jokes.example.com/") is None

    def test_joke_service_error_propagates(self):
        client = _make_client(lambda r: httpx.Response(503), [])

        with pytest.raises(httpx.HTTPStatusError):
            _call(client, "fetch_external_joke", "https://jokes.example.com/")
