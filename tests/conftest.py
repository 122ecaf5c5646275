"""Pytest configuration for all tests."""

import pytest


BOT_ENV_VARS = (
    "REPOBOT_GITHUB_TOKEN",
    "REPOBOT_GITHUB_BASE_URL",
    "REPOBOT_ALLOWLIST",
    "REPOBOT_SDK_REPOSITORIES",
    "REPOBOT_UPSTREAM_OWNER",
    "REPOBOT_DOCS_OWNER",
    "REPOBOT_DOCS_REPOSITORY",
    "REPOBOT_JOKE_URL",
    "REPOBOT_HTTP_TIMEOUT_SECONDS",
    "REPOBOT_LOG_LEVEL",
    "GITHUB_EVENT_NAME",
    "GITHUB_EVENT_PATH",
    "GITHUB_ACTOR",
)


@pytest.fixture(autouse=True)
def clean_bot_env(monkeypatch):
    """Keep the runner's own environment out of settings tests."""
    for name in BOT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_config_env(monkeypatch):
    """Set a complete bot configuration in the environment."""
    monkeypatch.setenv("REPOBOT_GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("REPOBOT_ALLOWLIST", '["Alice", " bob "]')
    monkeypatch.setenv("REPOBOT_SDK_REPOSITORIES", '["go-sdk", "rust-sdk"]')
    monkeypatch.setenv("REPOBOT_UPSTREAM_OWNER", "acme")
    monkeypatch.setenv("REPOBOT_DOCS_OWNER", "acme")
    monkeypatch.setenv("REPOBOT_DOCS_REPOSITORY", "handbook")
    return monkeypatch
