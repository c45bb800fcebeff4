"""Resolution of pull request commits against the main branch history."""

import logging
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Sequence

from ..errors import EmptyInputSetError, UnmatchedCommitError
from .chain import FingerprintIndex
from .fingerprint import as_utc, commit_fingerprint
from .models import ChainEntry, ChangeRequest, Commit, CommitMatch

logger = logging.getLogger(__name__)


def cutoff_date(change_requests: Sequence[ChangeRequest]) -> datetime:
    """Earliest creation date of the given pull requests.

    No commit of any of them can have landed on the main branch before this
    date, so it bounds the main branch scan window.

    Raises:
        EmptyInputSetError: If no pull request is given
    """
    if not change_requests:
        raise EmptyInputSetError("No merged pull requests to build a hotfix from")
    return min(as_utc(cr.created_at) for cr in change_requests)


@dataclass(frozen=True)
class MatchResult:
    """Complete binding of every indexed chain entry to a main branch commit."""

    matches: Mapping[ChainEntry, CommitMatch]

    def match_for(self, entry: ChainEntry) -> CommitMatch:
        try:
            return self.matches[entry]
        except KeyError:
            raise UnmatchedCommitError([entry]) from None

    def __contains__(self, entry: object) -> bool:
        return entry in self.matches

    def __iter__(self) -> Iterator[CommitMatch]:
        return iter(self.matches.values())

    def __len__(self) -> int:
        return len(self.matches)


class MainlineMatcher:
    """Binds main branch commits to pull request commits by fingerprint.

    Each main branch commit is offered to the entries sharing its fingerprint
    and binds the first one that is still free. When more main branch commits
    carry a fingerprint than there are entries, the earliest scanned ones win
    and the rest are ignored.
    """

    def match(self, mainline_commits: Iterable[Commit], index: FingerprintIndex) -> MatchResult:
        """Scan oldest-first main branch commits and bind them to ``index``.

        Returns:
            MatchResult holding one CommitMatch per indexed entry

        Raises:
            UnmatchedCommitError: If any entry is left without a counterpart
        """
        bound: Dict[ChainEntry, CommitMatch] = {}
        scanned = 0

        for commit in mainline_commits:
            scanned += 1
            fp = commit_fingerprint(commit)
            candidates = index.get(fp)
            if not candidates:
                continue

            free = next((entry for entry in candidates if entry not in bound), None)
            if free is None:
                logger.debug(
                    f"Main branch commit {commit.short_id} repeats fingerprint "
                    f"{fp:#010x} which is already matched, ignoring it"
                )
                continue

            bound[free] = CommitMatch(entry=free, mainline_commit=commit)
            logger.debug(
                f"Matched {free.commit.short_id} of PR {free.change_request.label} "
                f"to main branch commit {commit.short_id}"
            )

        unmatched = [entry for entry in index.entries() if entry not in bound]
        if unmatched:
            unmatched.sort(key=lambda e: (e.change_request.number, e.position))
            raise UnmatchedCommitError(unmatched)

        logger.info(f"Matched {len(bound)} commits against {scanned} main branch commits")
        return MatchResult(matches=MappingProxyType(bound))
