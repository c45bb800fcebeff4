"""Services wiring the hotfix engine to GitHub and git."""

from .git_replay_service import GitReplayService
from .github_cli import get_active_repository, get_github_token
from .hotfix_service import HotfixResult, HotfixService, parse_change_request_numbers

__all__ = [
    "GitReplayService",
    "get_active_repository",
    "get_github_token",
    "HotfixResult",
    "HotfixService",
    "parse_change_request_numbers",
]
