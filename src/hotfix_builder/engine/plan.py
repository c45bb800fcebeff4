"""Hotfix plan: matched commit chains in replay order."""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..errors import InvalidChangeRequestError, UnmatchedCommitError
from .chain import ChangeRequestCommitChain, FingerprintIndex
from .fingerprint import as_utc
from .matcher import MainlineMatcher, MatchResult
from .models import ChangeRequest, Commit, CommitMatch

logger = logging.getLogger(__name__)


def change_request_order_key(change_request: ChangeRequest) -> Tuple:
    """Sort key: merge date ascending, then pull request number.

    Pull requests without a merge date sort after all merged ones.
    """
    if change_request.merged_at is None:
        return (1, 0, change_request.number)
    return (0, as_utc(change_request.merged_at), change_request.number)


def _reject_duplicates(chains: Sequence[ChangeRequestCommitChain]) -> None:
    counts: Dict[int, int] = {}
    for chain in chains:
        number = chain.change_request.number
        counts[number] = counts.get(number, 0) + 1
    duplicates = sorted(number for number, count in counts.items() if count > 1)
    if duplicates:
        raise InvalidChangeRequestError(
            "A pull request can appear only once in a hotfix plan",
            details=", ".join(f"#{number} given {counts[number]} times" for number in duplicates),
        )


class HotfixPlan:
    """All pull request chains of a hotfix together with their matches.

    Pull requests are replayed in the order they were merged into the main
    branch; commits within a pull request keep their authoring order.
    Each pull request contributes exactly one chain.
    """

    def __init__(self, chains: Sequence[ChangeRequestCommitChain], result: MatchResult):
        _reject_duplicates(chains)
        self._chains: Tuple[ChangeRequestCommitChain, ...] = tuple(
            sorted(chains, key=lambda chain: change_request_order_key(chain.change_request))
        )
        self._result = result

        unmatched = [entry for chain in self._chains for entry in chain if entry not in result]
        if unmatched:
            raise UnmatchedCommitError(unmatched)

        self._by_number: Dict[int, ChangeRequestCommitChain] = {
            chain.change_request.number: chain for chain in self._chains
        }

    @classmethod
    def build(
        cls,
        chains: Sequence[ChangeRequestCommitChain],
        mainline_commits: Iterable[Commit],
        matcher: Optional[MainlineMatcher] = None,
    ) -> "HotfixPlan":
        """Index ``chains``, match them against the main branch and order them."""
        _reject_duplicates(chains)
        index = FingerprintIndex.from_chains(chains)
        result = (matcher or MainlineMatcher()).match(mainline_commits, index)
        plan = cls(chains, result)
        logger.info(
            f"Hotfix plan covers {len(plan.change_requests)} pull requests "
            f"with {len(plan)} commits"
        )
        return plan

    @property
    def chains(self) -> Tuple[ChangeRequestCommitChain, ...]:
        """Chains in replay order."""
        return self._chains

    @property
    def change_requests(self) -> List[ChangeRequest]:
        """Pull requests in replay order."""
        return [chain.change_request for chain in self._chains]

    @property
    def result(self) -> MatchResult:
        return self._result

    def matches(self, chain: ChangeRequestCommitChain) -> List[CommitMatch]:
        """Matches of ``chain`` from head to tail."""
        return [self._result.match_for(entry) for entry in chain]

    def previous(self, match: CommitMatch) -> Optional[CommitMatch]:
        """Match of the preceding commit in the same pull request."""
        entry = self._chain_of(match).previous(match.entry)
        return self._result.match_for(entry) if entry is not None else None

    def next(self, match: CommitMatch) -> Optional[CommitMatch]:
        """Match of the following commit in the same pull request."""
        entry = self._chain_of(match).next(match.entry)
        return self._result.match_for(entry) if entry is not None else None

    def _chain_of(self, match: CommitMatch) -> ChangeRequestCommitChain:
        try:
            return self._by_number[match.change_request.number]
        except KeyError:
            raise ValueError(
                f"PR {match.change_request.label} is not part of this hotfix plan"
            ) from None

    def __len__(self) -> int:
        return sum(len(chain) for chain in self._chains)
