"""Bot configuration using pydantic-settings.

This module defines the BotSettings class that reads configuration from
environment variables with the REPOBOT_ prefix, and the ActionContext class
that reads the GitHub Actions runtime variables (GITHUB_EVENT_NAME, ...)
describing the single event this process is handling.

The allowlist and the SDK registry are loaded once and never mutated: the
allowlist is stored lower-cased as a frozenset, the SDK registry as a tuple
so that fanout order is stable.
"""

from typing import FrozenSet, Optional, Tuple

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ALLOWLIST = (
    "antontroshin",
    "berndverst",
    "cicoyle",
    "daixiang0",
    "elena-kolevska",
    "halspang",
    "joshvanl",
    "mikeee",
    "msfussell",
    "yaron2",
)

DEFAULT_SDK_REPOSITORIES = (
    "dotnet-sdk",
    "go-sdk",
    "java-sdk",
    "js-sdk",
    "python-sdk",
    "php-sdk",
)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class BotSettings(BaseSettings):
    """Bot configuration from environment variables.

    All environment variables are prefixed with REPOBOT_ (e.g., REPOBOT_GITHUB_TOKEN).
    List-valued settings are given as JSON arrays, e.g.
    REPOBOT_ALLOWLIST='["alice", "bob"]'.

    Required fields (must be set via environment variables):
    - github_token: GitHub API token for comments, assignees, dispatches and issues
    """

    model_config = SettingsConfigDict(
        env_prefix="REPOBOT_",
        case_sensitive=False,
        frozen=True,
    )

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    github_token: str

    # Base URL for GitHub API (supports GitHub Enterprise)
    github_base_url: str = "https://api.github.com"

    http_timeout_seconds: float = 30.0

    # -------------------------------------------------------------------------
    # Authorization
    # -------------------------------------------------------------------------
    # Users allowed to run privileged commands, stored lower-cased
    allowlist: FrozenSet[str] = frozenset(DEFAULT_ALLOWLIST)

    # -------------------------------------------------------------------------
    # Label fanout targets
    # -------------------------------------------------------------------------
    # Label events are only acted on in repositories owned by this account
    upstream_owner: str = "dapr"

    docs_owner: str = "dapr"
    docs_repository: str = "docs"

    # SDK repositories (under upstream_owner) that get an issue on sdk-needed
    sdk_repositories: Tuple[str, ...] = DEFAULT_SDK_REPOSITORIES

    # -------------------------------------------------------------------------
    # Presentation
    # -------------------------------------------------------------------------
    bot_label: str = "created-by/dapr-bot"
    bot_workflow_url: str = (
        "https://github.com/dapr/dapr/blob/master/.github/workflows/dapr-bot.yml"
    )
    joke_url: str = "https://official-joke-api.appspot.com/random_joke"

    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: str) -> str:
        """Validate that GitHub token is not empty."""
        if not v or not v.strip():
            raise ValueError("github_token cannot be empty")
        return v.strip()

    @field_validator("github_base_url", "joke_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that a URL setting is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("allowlist", mode="before")
    @classmethod
    def normalize_allowlist(cls, v):
        """Lower-case and strip allowlist entries, dropping blanks."""
        if isinstance(v, str):
            v = [v]
        return frozenset(
            name.strip().lower() for name in v if isinstance(name, str) and name.strip()
        )

    @field_validator("sdk_repositories")
    @classmethod
    def validate_sdk_repositories(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        """Validate that SDK repository names are non-empty."""
        if any(not name.strip() for name in v):
            raise ValueError("sdk_repositories cannot contain empty names")
        return tuple(name.strip() for name in v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate that the HTTP timeout is positive."""
        if v <= 0:
            raise ValueError("http_timeout_seconds must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is a standard logging level name."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


class ActionContext(BaseSettings):
    """GitHub Actions runtime context for the event being handled.

    Read from the variables the Actions runner sets for every job step.
    """

    model_config = SettingsConfigDict(case_sensitive=False)

    github_event_name: str
    github_event_path: str
    github_actor: Optional[str] = None


def get_settings() -> BotSettings:
    """Create and return BotSettings instance.

    Returns:
        BotSettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return BotSettings()


def get_action_context() -> ActionContext:
    """Create and return the ActionContext for the current job step.

    Raises:
        pydantic.ValidationError: If the Actions variables are missing.
    """
    return ActionContext()
