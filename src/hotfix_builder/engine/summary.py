"""Summary of a hotfix for the pull request description."""

from typing import Iterable, List, Tuple

from .models import Commit
from .sequencer import ReplayStep

TABLE_HEADER = ("Pull Request", "commit main branch", "commit pr")


def _commit_ref(commit: Commit) -> str:
    return commit.html_url or commit.identifier


def summary_rows(steps: Iterable[ReplayStep]) -> List[Tuple[str, str, str]]:
    """One (pull request, main branch commit, pull request commit) row per step."""
    rows = []
    for step in steps:
        rows.append(
            (
                step.change_request.html_url or step.change_request.label,
                _commit_ref(step.match.mainline_commit),
                _commit_ref(step.match.pr_commit),
            )
        )
    return rows


def render_markdown_table(steps: Iterable[ReplayStep]) -> str:
    """Markdown table listing the replayed commits in replay order."""
    lines = [
        " | ".join(TABLE_HEADER),
        " | ".join("-" * len(column) for column in TABLE_HEADER),
    ]
    for row in summary_rows(steps):
        lines.append(" | ".join(row))
    return "\n".join(lines) + "\n"
