"""
Unit tests for ReplaySequencer, covering the end to end replay scenarios.
"""

import pytest

from hotfix_builder.engine.chain import ChangeRequestCommitChain
from hotfix_builder.engine.plan import HotfixPlan
from hotfix_builder.engine.sequencer import ReplaySequencer
from hotfix_builder.errors import UnmatchedCommitError


class TestReplaySequencer:
    """Test flattening plans into cherry-pick sequences."""

    def setup_method(self):
        self.sequencer = ReplaySequencer()

    def test_single_request_in_authoring_order(self, make_change_request, make_commit, rewrite, at):
        pr = make_change_request(10, created_at=at(0))
        m1 = make_commit("M1", at(1))
        m2 = make_commit("M2", at(2))
        main_m1 = rewrite(m1, sha="1" * 40)
        main_m2 = rewrite(m2, sha="2" * 40)
        chain = ChangeRequestCommitChain.build(pr, [m1, m2])

        plan = HotfixPlan.build([chain], [main_m1, main_m2])

        assert self.sequencer.sequence(plan) == ["1" * 40, "2" * 40]

    def test_authoring_order_wins_over_scan_order(
        self, make_change_request, make_commit, rewrite, at
    ):
        commits = [make_commit(f"C{i}", at(i)) for i in range(3)]
        mainline = [rewrite(c, sha=str(i) * 40) for i, c in enumerate(commits)]
        chain = ChangeRequestCommitChain.build(make_change_request(10), commits)

        plan = HotfixPlan.build([chain], list(reversed(mainline)))

        assert self.sequencer.sequence(plan) == ["0" * 40, "1" * 40, "2" * 40]

    def test_requests_replayed_by_merge_date(self, make_change_request, make_commit, rewrite, at):
        pr_a = make_change_request(20, created_at=at(0), merged_at=at(10))
        pr_b = make_change_request(21, created_at=at(1), merged_at=at(20))
        a = [make_commit("A1", at(2)), make_commit("A2", at(3))]
        b = [make_commit("B1", at(4)), make_commit("B2", at(5))]
        main_a = [rewrite(c, sha=f"a{i}".ljust(40, "0")) for i, c in enumerate(a)]
        main_b = [rewrite(c, sha=f"b{i}".ljust(40, "0")) for i, c in enumerate(b)]
        chains = [
            ChangeRequestCommitChain.build(pr_b, b),
            ChangeRequestCommitChain.build(pr_a, a),
        ]

        plan = HotfixPlan.build(chains, [main_b[0], main_a[0], main_b[1], main_a[1]])
        sequence = self.sequencer.sequence(plan)

        assert len(sequence) == 4
        assert sequence[:2] == [c.identifier for c in main_a]
        assert sequence[2:] == [c.identifier for c in main_b]

    def test_steps_carry_request_and_match(self, make_change_request, make_commit, rewrite, at):
        pr = make_change_request(10)
        commit = make_commit("A", at(1))
        main = rewrite(commit)
        plan = HotfixPlan.build([ChangeRequestCommitChain.build(pr, [commit])], [main])

        (step,) = list(self.sequencer.steps(plan))

        assert step.change_request == pr
        assert step.change_request is step.match.change_request
        assert step.match.pr_commit == commit
        assert step.mainline_id == main.identifier

    def test_duplicate_message_without_date_binds_first_scanned(
        self, make_change_request, make_commit
    ):
        pr = make_change_request(11)
        chain = ChangeRequestCommitChain.build(pr, [make_commit("fix typo")])
        first = make_commit("fix typo", sha="f" * 40)
        second = make_commit("fix typo", sha="e" * 40)

        plan = HotfixPlan.build([chain], [first, second])

        assert self.sequencer.sequence(plan) == ["f" * 40]

    def test_commit_outside_window_fails(self, make_change_request, make_commit, at):
        chain = ChangeRequestCommitChain.build(
            make_change_request(12), [make_commit("Never merged", at(1))]
        )

        with pytest.raises(UnmatchedCommitError) as exc_info:
            HotfixPlan.build([chain], [make_commit("Something else", at(2))])

        assert "#12" in str(exc_info.value)

    def test_empty_request_contributes_nothing(self, make_change_request, make_commit, rewrite, at):
        commit = make_commit("A", at(1))
        chains = [
            ChangeRequestCommitChain.build(make_change_request(10), []),
            ChangeRequestCommitChain.build(make_change_request(11), [commit]),
        ]
        main = rewrite(commit)

        plan = HotfixPlan.build(chains, [main])

        assert self.sequencer.sequence(plan) == [main.identifier]
