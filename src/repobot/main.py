"""Entry point for a single bot run.

Designed to run as a GitHub Actions step (or any job runner that provides
the same variables): it reads the event named by GITHUB_EVENT_NAME from the
payload file at GITHUB_EVENT_PATH, handles it, and exits.

Exit codes:
- 0: the event was handled or deliberately ignored
- 1: configuration error, unreadable payload, or a failed GitHub call
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError
from pydantic_settings import SettingsError

from .commands.handlers import CommandHandlers
from .config import ActionContext, BotSettings, get_action_context, get_settings
from .github.client import GitHubClient, RepoClient
from .router import CommandRouter
from .webhook.handler import create_webhook_handler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters.

    Args:
        value: The secret value to redact.
        visible_chars: Number of characters to show at the start.

    Returns:
        Redacted string with asterisks replacing hidden characters.
    """
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: BotSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Bot configuration:")
    logger.info(f"  GitHub Base URL: {settings.github_base_url}")
    logger.info(f"  GitHub Token: {_redact_secret(settings.github_token)}")
    logger.info(f"  Allowlist: {', '.join(sorted(settings.allowlist))}")
    logger.info(f"  Upstream Owner: {settings.upstream_owner}")
    logger.info(f"  Docs Repository: {settings.docs_owner}/{settings.docs_repository}")
    logger.info(f"  SDK Repositories: {', '.join(settings.sdk_repositories)}")


def _load_payload(path: str) -> Dict[str, Any]:
    """Read the webhook payload written by the Actions runner.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a JSON object.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Event payload in {path} is not a JSON object")
    return data


def build_router(settings: BotSettings, github_client: RepoClient) -> CommandRouter:
    """Wire handlers and router from settings.

    Args:
        settings: Validated bot settings.
        github_client: Repository operations implementation.

    Returns:
        A ready CommandRouter.
    """
    handlers = CommandHandlers.from_settings(github_client, settings)
    return CommandRouter.from_settings(handlers, settings)


async def run(
    settings: BotSettings,
    context: ActionContext,
    github_client: Optional[GitHubClient] = None,
) -> int:
    """Handle the event described by the Actions context.

    Args:
        settings: Validated bot settings.
        context: Event name, payload path and actor of this run.
        github_client: Client to use; one is created from settings if omitted.

    Returns:
        Process exit code.
    """
    try:
        payload = _load_payload(context.github_event_path)
    except (OSError, ValueError) as e:
        logger.error("Failed to load event payload: %s", e)
        return 1

    event = create_webhook_handler().parse_event(
        context.github_event_name,
        payload,
        actor=context.github_actor,
    )
    if event is None:
        return 0

    client = github_client or GitHubClient(
        token=settings.github_token,
        base_url=settings.github_base_url,
        timeout=settings.http_timeout_seconds,
    )

    try:
        async with client:
            await build_router(settings, client).handle(event)
    except Exception as e:
        logger.error("Bot run failed: %s", e, exc_info=True)
        return 1

    logger.info("Bot run completed")
    return 0


async def main() -> int:
    """Load configuration and handle one event."""
    try:
        settings = get_settings()
        context = get_action_context()
    except (ValidationError, SettingsError) as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error("Invalid configuration: %s", e)
        return 1

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    _log_configuration(settings)

    return await run(settings, context)


def cli() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
