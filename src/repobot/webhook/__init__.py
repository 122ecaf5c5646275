"""GitHub webhook handling for the bot.

This module turns GitHub webhook payloads into normalized events:
- issue_comment.created - Comment created on an issue or pull request
- issues.labeled - Label added to an issue

Signature validation is performed by the delivery channel (GitHub Actions
or the forwarding service) before payloads reach the bot.
"""

from .handler import WebhookHandler, create_webhook_handler
from .models import (
    BotEvent,
    CommentCreatedEvent,
    IssueLabeledEvent,
    IssueRef,
)

__all__ = [
    "BotEvent",
    "CommentCreatedEvent",
    "IssueLabeledEvent",
    "IssueRef",
    "WebhookHandler",
    "create_webhook_handler",
]
