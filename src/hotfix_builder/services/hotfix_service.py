"""Hotfix run orchestration.

Clean business logic that uses the API client and replay service
abstractions; no raw HTTP calls or subprocesses happen here.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from ..api_clients.github_client import GitHubAPIClient
from ..config import Config, RepositoryConfig
from ..engine import (
    ChangeRequest,
    ChangeRequestCommitChain,
    HotfixPlan,
    MainlineMatcher,
    ReplaySequencer,
    cutoff_date,
    render_markdown_table,
)
from ..errors import EmptyInputSetError, InvalidChangeRequestError
from .git_replay_service import GitReplayService

logger = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(r"^#?(\d+)$")


def parse_change_request_numbers(value: str) -> List[int]:
    """Parse a pull request list such as ``"#42, #164"``.

    Duplicates are dropped, keeping the first occurrence.

    Raises:
        InvalidChangeRequestError: If a token is not a pull request number
    """
    numbers: List[int] = []
    for token in value.split(","):
        token = token.strip()
        if not token:
            continue
        match = _NUMBER_PATTERN.match(token)
        if match is None:
            raise InvalidChangeRequestError(
                f"'{token}' is not a pull request number", details="expected e.g. '#42,#164'"
            )
        number = int(match.group(1))
        if number not in numbers:
            numbers.append(number)

    if not numbers:
        raise InvalidChangeRequestError("No pull request numbers given")
    return numbers


@dataclass
class HotfixResult:
    """Outcome of a completed hotfix run."""

    plan: HotfixPlan
    replayed: List[str] = field(default_factory=list)
    pull_request_url: Optional[str] = None
    summary: str = ""


class HotfixService:
    """Builds hotfix plans and turns them into hotfix branches."""

    def __init__(
        self,
        config: Config,
        repository: RepositoryConfig,
        api_client: GitHubAPIClient,
        replay_service: Optional[GitReplayService] = None,
        matcher: Optional[MainlineMatcher] = None,
        sequencer: Optional[ReplaySequencer] = None,
    ):
        self.config = config
        self.repository = repository
        self.api_client = api_client
        self.replay_service = replay_service
        self.matcher = matcher or MainlineMatcher()
        self.sequencer = sequencer or ReplaySequencer()

    def resolve_change_requests(self, numbers: Iterable[int]) -> List[ChangeRequest]:
        """Fetch the pull requests and keep the merged ones.

        Raises:
            EmptyInputSetError: If none of them is merged
        """
        numbers = list(numbers)
        merged: List[ChangeRequest] = []
        for number in numbers:
            change_request = self.api_client.get_pull_request(self.repository, number)
            if change_request.merged:
                merged.append(change_request)
            else:
                logger.warning(
                    f"Non-merged PR #{number} can't be added to hotfix. "
                    f"PR has state: {change_request.state}"
                )

        if not merged:
            raise EmptyInputSetError(
                "None of the given pull requests is merged",
                details=", ".join(f"#{n}" for n in numbers) or None,
            )
        return merged

    def build_chains(self, change_requests: Iterable[ChangeRequest]) -> List[ChangeRequestCommitChain]:
        chains = []
        for change_request in change_requests:
            commits = self.api_client.list_pull_request_commits(
                self.repository, change_request.number
            )
            chains.append(ChangeRequestCommitChain.build(change_request, commits))
        return chains

    def build_plan(self, numbers: Iterable[int], main_branch: Optional[str] = None) -> HotfixPlan:
        """Resolve, fetch, match and order everything a hotfix needs.

        Nothing is changed in git or on GitHub.

        Raises:
            EmptyInputSetError: If no merged pull request remains
            UnmatchedCommitError: If a pull request commit is not on the main branch
            UpstreamFetchError: If a GitHub call fails
        """
        numbers = list(numbers)
        branch = main_branch or self.config.main_branch

        change_requests = self.resolve_change_requests(numbers)
        chains = self.build_chains(change_requests)
        since = cutoff_date(change_requests)

        mainline_commits = self.api_client.list_branch_commits(self.repository, branch, since)
        return HotfixPlan.build(chains, mainline_commits, matcher=self.matcher)

    def summarize(self, plan: HotfixPlan) -> str:
        return render_markdown_table(self.sequencer.steps(plan))

    def create_hotfix(
        self,
        numbers: Iterable[int],
        hotfix_name: str,
        release_branch: str,
        main_branch: Optional[str] = None,
        progress_callback: Optional[Callable[[str, int, int], None]] = None,
    ) -> HotfixResult:
        """Build the plan, replay it onto a new hotfix branch and open a pull request.

        The plan is complete and fully matched before the first git command
        runs, so a matching failure never leaves a half-built branch.
        """
        if self.replay_service is None:
            raise ValueError("A GitReplayService is required to create a hotfix")

        plan = self.build_plan(numbers, main_branch=main_branch)
        sequence = self.sequencer.sequence(plan)
        summary = self.summarize(plan)

        self.replay_service.checkout_hotfix_branch(release_branch, hotfix_name)
        replayed = self.replay_service.cherry_pick(sequence, progress_callback=progress_callback)
        self.replay_service.push(hotfix_name)

        url = self.api_client.create_pull_request(
            self.repository,
            title=f"Hotfix {hotfix_name}",
            head=hotfix_name,
            base=release_branch,
            body=summary,
        )
        return HotfixResult(plan=plan, replayed=replayed, pull_request_url=url, summary=summary)
