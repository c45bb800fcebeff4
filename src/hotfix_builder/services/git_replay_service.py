"""
Git replay service.

Creates the hotfix branch from the release branch, cherry-picks the replay
sequence onto it and pushes it. The first failing command aborts; nothing is
rolled back, the working copy is left as git left it.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..config import GitConfig
from ..utils.git_runner import run_git_command

logger = logging.getLogger(__name__)


class GitReplayService:
    """Executes the git side of a hotfix run in a working copy."""

    def __init__(self, repo_dir: Path, config: Optional[GitConfig] = None):
        """Initialize the replay service.

        Args:
            repo_dir: Root directory of the git working copy
            config: Git configuration (remote name and timeout)
        """
        self.repo_dir = Path(repo_dir)
        self.config = config or GitConfig()

    def _git(self, *args: str) -> str:
        result = run_git_command(["git", *args], cwd=self.repo_dir, timeout=self.config.timeout)
        return result.stdout

    def checkout_hotfix_branch(self, release_branch: str, hotfix_name: str) -> None:
        """Create ``hotfix_name`` from the up to date ``release_branch``."""
        logger.info(f"Creating hotfix branch '{hotfix_name}' from '{release_branch}'")
        self._git("fetch")
        self._git("checkout", release_branch)
        self._git("pull")
        self._git("checkout", "-b", hotfix_name)

    def cherry_pick(
        self,
        commit_ids: Sequence[str],
        progress_callback: Optional[Callable[[str, int, int], None]] = None,
    ) -> List[str]:
        """Cherry-pick ``commit_ids`` in order.

        Returns:
            The identifiers that were applied, i.e. all of them

        Raises:
            GitCommandError: On the first failing cherry-pick
        """
        applied: List[str] = []
        total = len(commit_ids)
        for position, commit_id in enumerate(commit_ids, 1):
            if progress_callback:
                progress_callback(commit_id, position, total)
            self._git("cherry-pick", commit_id)
            applied.append(commit_id)
            logger.debug(f"Cherry-picked {commit_id} ({position}/{total})")
        return applied

    def push(self, branch: str) -> None:
        logger.info(f"Pushing '{branch}' to '{self.config.remote}'")
        self._git("push", self.config.remote, branch)
