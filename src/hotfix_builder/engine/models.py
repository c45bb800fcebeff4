"""Value objects shared by the matching and replay-ordering engine."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Commit:
    """A commit as delivered by the hosting API.

    ``identifier`` is the SHA. It changes when a pull request is rebased or
    squash-merged, so it is never used to recognise a commit across branches.
    """

    identifier: str
    message: str
    author_date: Optional[datetime] = None
    html_url: Optional[str] = None

    @property
    def short_id(self) -> str:
        return self.identifier[:7]

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0].strip()


@dataclass(frozen=True)
class ChangeRequest:
    """Metadata of one pull request taking part in a hotfix."""

    number: int
    created_at: datetime
    merged_at: Optional[datetime] = None
    merged: bool = False
    title: str = ""
    html_url: Optional[str] = None
    state: str = "open"

    @property
    def label(self) -> str:
        return f"#{self.number}"


@dataclass(frozen=True)
class ChainEntry:
    """Pull request side of a commit match, positioned within its chain."""

    change_request: ChangeRequest
    commit: Commit
    fingerprint: int
    position: int


@dataclass(frozen=True)
class CommitMatch:
    """A pull request commit bound to its rewritten main branch counterpart."""

    entry: ChainEntry
    mainline_commit: Commit

    @property
    def change_request(self) -> ChangeRequest:
        return self.entry.change_request

    @property
    def pr_commit(self) -> Commit:
        return self.entry.commit

    @property
    def fingerprint(self) -> int:
        return self.entry.fingerprint

    @property
    def mainline_id(self) -> str:
        return self.mainline_commit.identifier
