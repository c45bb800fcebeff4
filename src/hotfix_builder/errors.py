"""Exception hierarchy for Hotfix Builder.

Every failure of a hotfix run is terminal: nothing is retried and no partial
plan is produced. The CLI maps any HotfixError to exit status 1.
"""

from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from .engine.models import ChainEntry


class HotfixError(Exception):
    """Base exception for all hotfix run failures."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(HotfixError):
    """Raised when configuration, credentials or repository identity are unusable."""

    pass


class InvalidChangeRequestError(HotfixError):
    """Raised when the list of pull request numbers cannot be parsed."""

    pass


class EmptyInputSetError(HotfixError):
    """Raised when no merged pull request is left to build a hotfix from."""

    pass


class UpstreamFetchError(HotfixError):
    """Raised when an external collaborator (GitHub API, git, gh) fails."""

    pass


class GitCommandError(UpstreamFetchError):
    """Raised when a git or gh subprocess exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message, details=(stderr or "").strip() or None)
        self.command = list(command or [])
        self.stderr = stderr or ""


class UnmatchedCommitError(HotfixError):
    """Raised when pull request commits have no counterpart on the main branch.

    Carries every unmatched chain entry so callers can report which pull
    request is missing which commit.
    """

    def __init__(self, unmatched: Sequence["ChainEntry"]):
        self.unmatched: List["ChainEntry"] = list(unmatched)
        lines = [
            f"PR #{entry.change_request.number}: fingerprint {entry.fingerprint:#010x} "
            f"(commit {entry.commit.short_id}, '{entry.commit.subject}')"
            for entry in self.unmatched
        ]
        super().__init__(
            f"{len(self.unmatched)} pull request commit(s) could not be matched "
            f"on the main branch",
            details="; ".join(lines),
        )


# Name used by the matching engine for the same failure
MatchFailure = UnmatchedCommitError
