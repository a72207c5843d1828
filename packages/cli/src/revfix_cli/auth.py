"""GitHub credentials for the fetch and resolve commands.

load_config() has already copied GITHUB_TOKEN into the config. When that is
empty the GitHub CLI session is asked for a token, so `gh auth login` is
enough to use revfix locally.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SOURCE_ENV = "GITHUB_TOKEN"
SOURCE_GH_CLI = "gh auth token"

_GH_TIMEOUT = 5


@dataclass
class GitHubCredentials:
    token: str | None = None
    source: str | None = None

    def __bool__(self) -> bool:
        return bool(self.token)


def gh_cli_token() -> str | None:
    """Token of the current `gh` session, or None when gh is missing or logged out."""
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=_GH_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh CLI unavailable: %s", e)
        return None
    if result.returncode != 0:
        logger.debug("gh auth token exited with %d", result.returncode)
        return None
    return result.stdout.strip() or None


def resolve_github_credentials(config: dict) -> GitHubCredentials:
    """Pick the token from the loaded config, falling back to the gh CLI session."""
    if config.get("github_token"):
        return GitHubCredentials(config["github_token"], SOURCE_ENV)

    token = gh_cli_token()
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
        return GitHubCredentials(token, SOURCE_GH_CLI)
    return GitHubCredentials()
