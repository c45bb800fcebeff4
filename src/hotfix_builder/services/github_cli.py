"""
Credential and repository lookup through the environment and the gh CLI.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..config import GitHubConfig, RepositoryConfig
from ..errors import ConfigurationError, GitCommandError
from ..utils.git_runner import run_command

logger = logging.getLogger(__name__)


def get_github_token(config: GitHubConfig) -> str:
    """
    Resolve the GitHub API token.

    The environment variable named by ``config.token_env_var`` wins; otherwise
    the token stored by ``gh auth login`` is used.

    Raises:
        ConfigurationError: If neither source yields a token
    """
    token = os.environ.get(config.token_env_var, "").strip()
    if token:
        return token

    logger.debug(f"{config.token_env_var} is not set, asking gh for a token")
    try:
        result = run_command(["gh", "config", "get", "oauth_token", "-h", config.host])
    except GitCommandError as e:
        raise ConfigurationError(
            f"{config.token_env_var} environment variable is not set and gh has no token",
            details=str(e),
        ) from e

    token = result.stdout.strip()
    if not token:
        raise ConfigurationError(
            f"{config.token_env_var} environment variable is not set and gh has no token "
            f"for {config.host}. Run 'gh auth login' or export {config.token_env_var}."
        )
    return token


def get_active_repository(cwd: Optional[Path] = None) -> RepositoryConfig:
    """
    Identify the GitHub repository of the working copy with ``gh repo view``.

    Raises:
        ConfigurationError: If gh fails or returns an unexpected document
    """
    try:
        result = run_command(["gh", "repo", "view", "--json", "name,owner"], cwd=cwd)
    except GitCommandError as e:
        raise ConfigurationError(
            "Cannot determine the GitHub repository of the working copy", details=str(e)
        ) from e

    try:
        data = json.loads(result.stdout)
        repository = RepositoryConfig(owner=data["owner"]["login"], name=data["name"])
    except (ValueError, KeyError, TypeError, ValidationError) as e:
        raise ConfigurationError(
            "Unexpected output from 'gh repo view --json name,owner'", details=str(e)
        ) from e

    logger.debug(f"Active repository is {repository.full_name}")
    return repository
