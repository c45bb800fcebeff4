"""Commit matching and replay ordering for hotfix branches.

Pull request commits get new SHAs when merged, so they are recognised on the
main branch by a fingerprint of message and author date. The engine builds
one chain per pull request, matches the chains against the main branch,
orders them by merge date and flattens the result into a cherry-pick
sequence.
"""

from .chain import ChangeRequestCommitChain, FingerprintIndex
from .fingerprint import as_utc, commit_fingerprint, fingerprint
from .matcher import MainlineMatcher, MatchResult, cutoff_date
from .models import ChainEntry, ChangeRequest, Commit, CommitMatch
from .plan import HotfixPlan, change_request_order_key
from .sequencer import ReplaySequencer, ReplayStep
from .summary import render_markdown_table, summary_rows

__all__ = [
    # Models
    "Commit",
    "ChangeRequest",
    "ChainEntry",
    "CommitMatch",
    # Fingerprints
    "fingerprint",
    "commit_fingerprint",
    "as_utc",
    # Chains and matching
    "ChangeRequestCommitChain",
    "FingerprintIndex",
    "MainlineMatcher",
    "MatchResult",
    "cutoff_date",
    # Ordering and replay
    "HotfixPlan",
    "change_request_order_key",
    "ReplaySequencer",
    "ReplayStep",
    "render_markdown_table",
    "summary_rows",
]
