"""Comment and issue text produced by the bot.

Source:
- src/repobot/webhook/models.py (IssueRef)
"""

from src.repobot.webhook.models import IssueRef


JOKE_FALLBACK = "I have a bad feeling about this."

DOCS_NEEDED_LABEL = "docs-needed"
SDK_NEEDED_LABEL = "sdk-needed"

DOCS_ISSUE_LABELS = ("content/missing-information",)
SDK_ISSUE_LABELS = ("enhancement",)


def format_not_allowed_comment(username: str) -> str:
    """Comment posted when a user who is not allowlisted runs a privileged command."""
    return (
        f"👋 @{username}, my apologies but I can't perform this action for you "
        "because your username is not in the allowlist of this bot."
    )


def format_joke(joke: object) -> str:
    """Format a joke service response as "<setup> - <punchline>".

    Args:
        joke: Decoded joke service response, possibly malformed.

    Returns:
        The joke, or JOKE_FALLBACK when setup or punchline is missing.
    """
    if not isinstance(joke, dict):
        return JOKE_FALLBACK

    setup = joke.get("setup")
    punchline = joke.get("punchline")
    if not setup or not punchline:
        return JOKE_FALLBACK

    return f"{setup} - {punchline}"


def format_docs_issue_title(issue: IssueRef) -> str:
    return f"New content needed for {issue.issue_id}"


def format_docs_issue_body(issue: IssueRef, bot_workflow_url: str) -> str:
    """Body of the issue opened in the docs repository on docs-needed."""
    return (
        f"This issue was automatically created by [the repository bot]({bot_workflow_url}) "
        f'because a "{DOCS_NEEDED_LABEL}" label was added to {issue.issue_id}. \n\n'
        "Please add more details as per "
        "[this template](.github/ISSUE_TEMPLATE/new-content-needed.md)."
    )


def format_sdk_issue_title(issue: IssueRef) -> str:
    return f"Add support for {issue.issue_id}"


def format_sdk_issue_body(issue: IssueRef, bot_workflow_url: str) -> str:
    """Body of the issue opened in each SDK repository on sdk-needed."""
    return (
        f"This issue was automatically created by [the repository bot]({bot_workflow_url}) "
        f'because a "{SDK_NEEDED_LABEL}" label was added to {issue.issue_id}. \n\n'
        "Please add more details."
    )
