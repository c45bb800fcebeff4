"""Flattening of a hotfix plan into the cherry-pick sequence."""

from dataclasses import dataclass
from typing import Iterator, List

from .models import ChangeRequest, CommitMatch
from .plan import HotfixPlan


@dataclass(frozen=True)
class ReplayStep:
    """One cherry-pick: a matched commit and the pull request it came from."""

    match: CommitMatch

    @property
    def change_request(self) -> ChangeRequest:
        return self.match.change_request

    @property
    def mainline_id(self) -> str:
        return self.match.mainline_id


class ReplaySequencer:
    """Walks pull requests in plan order and each chain from head to tail."""

    def steps(self, plan: HotfixPlan) -> Iterator[ReplayStep]:
        for chain in plan.chains:
            for match in plan.matches(chain):
                yield ReplayStep(match=match)

    def sequence(self, plan: HotfixPlan) -> List[str]:
        """Main branch SHAs to cherry-pick, in order."""
        return [step.mainline_id for step in self.steps(plan)]
