"""GitHub webhook payload adaptation for the bot.

This module provides the WebhookHandler class that turns a raw GitHub
webhook payload (as delivered to an Actions job via GITHUB_EVENT_PATH) into
one of the normalized events the router understands. Signature validation
is the delivery channel's concern, so payloads are trusted.

GitHub Webhook Payload Structure (issue_comment event):
{
  "action": "created",
  "issue": {
    "number": 123,
    "assignees": [{"login": "someone"}],
    "pull_request": {...}          # present only for pull requests
  },
  "comment": {"id": 1, "body": "/ok-to-test", "user": {"login": "username"}},
  "repository": {"name": "repo-name", "owner": {"login": "owner-name"}},
  "sender": {"login": "username"}
}

The issues.labeled payload carries "label": {"name": "docs-needed"} instead
of "comment".
"""

import logging
from typing import Any, Dict, FrozenSet, Optional

from .models import BotEvent, CommentCreatedEvent, IssueLabeledEvent, IssueRef

logger = logging.getLogger(__name__)


class WebhookHandler:
    """Parser from GitHub webhook payloads to bot events.

    Only two (event, action) pairs are supported: issue_comment/created and
    issues/labeled. Everything else parses to None.
    """

    def parse_event(
        self,
        event_name: str,
        payload: Dict[str, Any],
        actor: Optional[str] = None,
    ) -> Optional[BotEvent]:
        """Parse a webhook payload into a bot event.

        Args:
            event_name: The webhook event name (X-GitHub-Event / GITHUB_EVENT_NAME).
            payload: The raw webhook payload as a dictionary.
            actor: The user who triggered the event, when known from the
                   delivery context (GITHUB_ACTOR). Falls back to the
                   comment author and then the sender.

        Returns:
            CommentCreatedEvent or IssueLabeledEvent, or None for unsupported
            events and malformed payloads.
        """
        if not isinstance(payload, dict):
            logger.warning("Invalid payload: expected dict, got %s", type(payload))
            return None

        action = payload.get("action")
        if event_name == "issue_comment" and action == "created":
            return self._parse_comment_created(payload, actor)
        if event_name == "issues" and action == "labeled":
            return self._parse_issue_labeled(payload)

        logger.info("Event %s (action %s) not supported, exiting.", event_name, action)
        return None

    def _parse_comment_created(
        self, payload: Dict[str, Any], actor: Optional[str]
    ) -> Optional[CommentCreatedEvent]:
        issue = self._parse_issue_ref(payload)
        if issue is None:
            return None

        comment = payload.get("comment")
        if not isinstance(comment, dict):
            logger.warning("Missing or invalid 'comment' field in payload")
            return None

        body = comment.get("body")
        if not isinstance(body, str):
            body = ""

        actor_name = (
            (actor or "").strip()
            or self._extract_login(comment.get("user"))
            or self._extract_login(payload.get("sender"))
        )
        if not actor_name:
            logger.warning("Could not determine comment actor")
            return None

        is_pull_request = bool(payload["issue"].get("pull_request"))

        logger.info(
            "Comment on %s by %s (comment id %s, created at %s)",
            issue.issue_id,
            actor_name,
            comment.get("id"),
            comment.get("created_at"),
        )

        return CommentCreatedEvent(
            issue=issue,
            comment_body=body.strip(),
            actor_name=actor_name,
            is_pull_request=is_pull_request,
        )

    def _parse_issue_labeled(self, payload: Dict[str, Any]) -> Optional[IssueLabeledEvent]:
        issue = self._parse_issue_ref(payload)
        if issue is None:
            return None

        label = payload.get("label")
        name = label.get("name") if isinstance(label, dict) else None
        if not isinstance(name, str) or not name.strip():
            logger.warning("Missing or invalid 'label' field in payload")
            return None

        logger.info("Label %s added to %s", name, issue.issue_id)
        return IssueLabeledEvent(issue=issue, label_name=name.strip())

    def _parse_issue_ref(self, payload: Dict[str, Any]) -> Optional[IssueRef]:
        """Extract the issue reference shared by both event shapes."""
        issue_data = payload.get("issue")
        if not isinstance(issue_data, dict):
            logger.warning("Missing or invalid 'issue' field in payload")
            return None

        number = issue_data.get("number")
        if not isinstance(number, int) or isinstance(number, bool) or number <= 0:
            logger.warning("Invalid issue number: %s", number)
            return None

        repo_data = payload.get("repository")
        if not isinstance(repo_data, dict):
            logger.warning("Missing or invalid 'repository' field in payload")
            return None

        repo_name = repo_data.get("name")
        owner = self._extract_login(repo_data.get("owner"))
        if not isinstance(repo_name, str) or not repo_name.strip() or not owner:
            logger.warning("Invalid repository in payload: %s", repo_data.get("full_name"))
            return None

        return IssueRef(
            owner=owner,
            repo=repo_name.strip(),
            number=number,
            assignees=self._extract_assignees(issue_data.get("assignees")),
        )

    def _extract_assignees(self, assignees_data: Any) -> FrozenSet[str]:
        if not isinstance(assignees_data, list):
            return frozenset()
        logins = (self._extract_login(entry) for entry in assignees_data)
        return frozenset(login for login in logins if login)

    def _extract_login(self, user_data: Any) -> Optional[str]:
        if not isinstance(user_data, dict):
            return None
        login = user_data.get("login")
        if not isinstance(login, str) or not login.strip():
            return None
        return login.strip()


def create_webhook_handler() -> WebhookHandler:
    """Factory function to create a WebhookHandler instance."""
    return WebhookHandler()
