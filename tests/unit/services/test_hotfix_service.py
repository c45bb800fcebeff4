"""
Unit tests for HotfixService orchestration.

The GitHub client and the replay service are mocked; the engine runs for
real.
"""

import logging
from unittest.mock import Mock, call

import pytest

from hotfix_builder.api_clients.github_client import GitHubAPIClient
from hotfix_builder.config import Config, RepositoryConfig
from hotfix_builder.errors import (
    EmptyInputSetError,
    GitCommandError,
    InvalidChangeRequestError,
    UnmatchedCommitError,
)
from hotfix_builder.services.git_replay_service import GitReplayService
from hotfix_builder.services.hotfix_service import HotfixService, parse_change_request_numbers

REPO = RepositoryConfig(owner="acme", name="widgets")


class TestParseChangeRequestNumbers:
    """Test parsing of the pull request list option."""

    def test_hash_prefixed_list(self):
        assert parse_change_request_numbers("#42,#164") == [42, 164]

    def test_plain_numbers_and_whitespace(self):
        assert parse_change_request_numbers(" 42 , #7,") == [42, 7]

    def test_duplicates_keep_first_occurrence(self):
        assert parse_change_request_numbers("#5,#3,5") == [5, 3]

    @pytest.mark.parametrize("value", ["#abc", "42;43", "#-1", "PR42"])
    def test_invalid_tokens(self, value):
        with pytest.raises(InvalidChangeRequestError):
            parse_change_request_numbers(value)

    def test_empty_list(self):
        with pytest.raises(InvalidChangeRequestError, match="No pull request numbers"):
            parse_change_request_numbers(" , ")


class TestHotfixService:
    """Test plan building and hotfix creation."""

    @pytest.fixture
    def history(self, make_change_request, make_commit, rewrite, at):
        """Two merged pull requests, one open, and the main branch after merging."""
        pr_10 = make_change_request(10, created_at=at(0), merged_at=at(30))
        pr_11 = make_change_request(11, created_at=at(2), merged_at=at(20))
        pr_12 = make_change_request(12, created_at=at(1), merged=False, state="open")
        commits = {
            10: [make_commit("Ten A", at(3)), make_commit("Ten B", at(4))],
            11: [make_commit("Eleven", at(5))],
            12: [make_commit("Twelve", at(6))],
        }
        mainline = [rewrite(commits[11][0]), rewrite(commits[10][0]), rewrite(commits[10][1])]
        return {
            "prs": {10: pr_10, 11: pr_11, 12: pr_12},
            "commits": commits,
            "mainline": mainline,
        }

    @pytest.fixture
    def api_client(self, history):
        client = Mock(spec=GitHubAPIClient)
        client.get_pull_request.side_effect = lambda repo, number: history["prs"][number]
        client.list_pull_request_commits.side_effect = lambda repo, number: history["commits"][number]
        client.list_branch_commits.return_value = history["mainline"]
        client.create_pull_request.return_value = "https://github.com/acme/widgets/pull/99"
        return client

    @pytest.fixture
    def replay_service(self):
        service = Mock(spec=GitReplayService)
        service.cherry_pick.side_effect = lambda ids, progress_callback=None: list(ids)
        return service

    @pytest.fixture
    def service(self, api_client, replay_service):
        return HotfixService(Config(main_branch="main"), REPO, api_client, replay_service)

    def test_unmerged_requests_are_skipped(self, service, caplog):
        with caplog.at_level(logging.WARNING):
            merged = service.resolve_change_requests([10, 12, 11])

        assert [cr.number for cr in merged] == [10, 11]
        assert "Non-merged PR #12" in caplog.text
        assert "open" in caplog.text

    def test_no_merged_request_is_empty_input(self, service, api_client):
        with pytest.raises(EmptyInputSetError, match="None of the given pull requests"):
            service.build_plan([12])

        api_client.list_branch_commits.assert_not_called()

    def test_build_plan_scans_main_branch_since_oldest_request(self, service, api_client, at):
        service.build_plan([10, 11])

        api_client.list_branch_commits.assert_called_once_with(REPO, "main", at(0))
        api_client.list_pull_request_commits.assert_has_calls([call(REPO, 10), call(REPO, 11)])

    def test_build_plan_main_branch_override(self, service, api_client, at):
        service.build_plan([10, 11], main_branch="develop")

        api_client.list_branch_commits.assert_called_once_with(REPO, "develop", at(0))

    def test_build_plan_orders_by_merge_date(self, service, history):
        plan = service.build_plan([10, 11])

        assert [cr.number for cr in plan.change_requests] == [11, 10]
        assert service.sequencer.sequence(plan) == [c.identifier for c in history["mainline"]]

    def test_create_hotfix_replays_then_opens_pull_request(
        self, service, api_client, replay_service, history
    ):
        manager = Mock()
        manager.attach_mock(replay_service, "replay")
        manager.attach_mock(api_client.create_pull_request, "create_pull_request")

        result = service.create_hotfix([10, 11], hotfix_name="hf-1", release_branch="release/1.0")

        expected_sequence = [c.identifier for c in history["mainline"]]
        assert result.replayed == expected_sequence
        assert result.pull_request_url == "https://github.com/acme/widgets/pull/99"
        assert [c[0] for c in manager.mock_calls] == [
            "replay.checkout_hotfix_branch",
            "replay.cherry_pick",
            "replay.push",
            "create_pull_request",
        ]
        replay_service.checkout_hotfix_branch.assert_called_once_with("release/1.0", "hf-1")
        replay_service.push.assert_called_once_with("hf-1")

        kwargs = api_client.create_pull_request.call_args.kwargs
        assert kwargs["title"] == "Hotfix hf-1"
        assert kwargs["head"] == "hf-1"
        assert kwargs["base"] == "release/1.0"
        assert kwargs["body"] == result.summary
        assert kwargs["body"].startswith("Pull Request | commit main branch | commit pr")

    def test_unmatched_commit_stops_before_git(self, service, api_client, replay_service, history):
        api_client.list_branch_commits.return_value = history["mainline"][:2]

        with pytest.raises(UnmatchedCommitError) as exc_info:
            service.create_hotfix([10, 11], hotfix_name="hf-1", release_branch="release/1.0")

        assert [e.commit.message for e in exc_info.value.unmatched] == ["Ten B"]
        replay_service.checkout_hotfix_branch.assert_not_called()
        replay_service.cherry_pick.assert_not_called()
        api_client.create_pull_request.assert_not_called()

    def test_cherry_pick_failure_aborts_run(self, service, api_client, replay_service):
        replay_service.cherry_pick.side_effect = GitCommandError(
            "Error during 'git cherry-pick abc'", command=["git", "cherry-pick", "abc"]
        )

        with pytest.raises(GitCommandError):
            service.create_hotfix([10, 11], hotfix_name="hf-1", release_branch="release/1.0")

        replay_service.push.assert_not_called()
        api_client.create_pull_request.assert_not_called()

    def test_create_requires_replay_service(self, api_client):
        service = HotfixService(Config(), REPO, api_client)

        with pytest.raises(ValueError, match="GitReplayService"):
            service.create_hotfix([10], hotfix_name="hf-1", release_branch="release/1.0")
