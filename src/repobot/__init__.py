"""Repository automation bot for GitHub issue comments and labels.

This package reacts to a single GitHub webhook event per run, providing:
- Slash-commands in issue and pull request comments (/assign, /ok-to-test, ...)
- Allowlist-based authorization for privileged commands
- repository_dispatch events that trigger CI pipelines
- Follow-up issues in the docs and SDK repositories on docs-needed / sdk-needed
"""
