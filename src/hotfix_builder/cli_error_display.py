"""
CLI error display for hotfix runs.

Renders HotfixError failures as rich panels with the actionable detail the
user needs: which pull request commits are missing from the main branch,
which git command failed, or which API call was rejected.
"""

import logging
import traceback
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .api_clients.base_client import APIClientError, AuthenticationError
from .errors import (
    EmptyInputSetError,
    GitCommandError,
    HotfixError,
    UnmatchedCommitError,
)

logger = logging.getLogger(__name__)


class CLIErrorDisplay:
    """Formats hotfix errors for the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def display_error(self, error: HotfixError, show_technical_details: bool = False) -> None:
        """Print ``error`` with guidance; optionally with its traceback."""
        body = Text()
        body.append(f"{error.message}\n", style="bold")

        hint = self._hint_for(error)
        if hint:
            body.append(f"\n{hint}", style="yellow")

        if isinstance(error, GitCommandError) and error.stderr.strip():
            body.append(f"\n\n{error.stderr.strip()}", style="dim")
        elif error.details and not isinstance(error, UnmatchedCommitError):
            body.append(f"\n\n{error.details}", style="dim")

        self.console.print(
            Panel(body, title=f"❌ {type(error).__name__}", border_style="red", expand=False)
        )

        if isinstance(error, UnmatchedCommitError):
            self.console.print(self._unmatched_table(error))

        if show_technical_details:
            self.console.print(
                "".join(traceback.format_exception(type(error), error, error.__traceback__)),
                style="dim",
                markup=False,
            )

    @staticmethod
    def _hint_for(error: HotfixError) -> Optional[str]:
        if isinstance(error, UnmatchedCommitError):
            return (
                "These commits were not found on the main branch since the oldest pull "
                "request was created. Check that the pull requests were merged into the "
                "main branch and that no commit was edited while merging. "
                "No git command was run."
            )
        if isinstance(error, EmptyInputSetError):
            return "Only merged pull requests can be added to a hotfix."
        if isinstance(error, AuthenticationError):
            return "Check GITHUB_TOKEN or run 'gh auth login'."
        if isinstance(error, GitCommandError):
            return "The working copy was left as git left it; no rollback was attempted."
        if isinstance(error, APIClientError) and error.status_code:
            return f"GitHub answered with HTTP {error.status_code}."
        return None

    @staticmethod
    def _unmatched_table(error: UnmatchedCommitError) -> Table:
        table = Table(title="Unmatched pull request commits", show_lines=False)
        table.add_column("Pull Request", style="cyan")
        table.add_column("Fingerprint", style="magenta")
        table.add_column("Commit", style="yellow")
        table.add_column("Message")
        for entry in error.unmatched:
            table.add_row(
                entry.change_request.label,
                f"{entry.fingerprint:#010x}",
                entry.commit.short_id,
                entry.commit.subject,
            )
        return table
