"""
Shared pytest fixtures for Hotfix Builder tests.

Provides factories for commits and pull requests so tests can describe
histories compactly.
"""

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Callable, Optional

import pytest

from hotfix_builder.engine.models import ChangeRequest, Commit

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def at() -> Callable[[float], datetime]:
    """Timestamp factory: ``at(h)`` is ``h`` hours after base_time."""

    def _at(hours: float) -> datetime:
        return BASE_TIME + timedelta(hours=hours)

    return _at


@pytest.fixture
def make_commit() -> Callable[..., Commit]:
    """Factory for commits with unique SHAs."""
    sequence = count(1)

    def _make(
        message: str,
        author_date: Optional[datetime] = None,
        sha: Optional[str] = None,
        html_url: Optional[str] = None,
    ) -> Commit:
        identifier = sha or f"{next(sequence):040x}"
        return Commit(
            identifier=identifier,
            message=message,
            author_date=author_date,
            html_url=html_url,
        )

    return _make


@pytest.fixture
def rewrite(make_commit) -> Callable[[Commit], Commit]:
    """Factory producing the main branch copy of a pull request commit.

    Same message and author date, new SHA, as after rebase and merge.
    """

    def _rewrite(commit: Commit, sha: Optional[str] = None) -> Commit:
        return make_commit(commit.message, commit.author_date, sha=sha)

    return _rewrite


@pytest.fixture
def make_change_request() -> Callable[..., ChangeRequest]:
    """Factory for merged pull requests."""

    def _make(
        number: int,
        created_at: Optional[datetime] = None,
        merged_at: Optional[datetime] = None,
        merged: bool = True,
        state: str = "closed",
    ) -> ChangeRequest:
        created = created_at or BASE_TIME
        if merged_at is None and merged:
            merged_at = created + timedelta(days=1)
        return ChangeRequest(
            number=number,
            created_at=created,
            merged_at=merged_at,
            merged=merged,
            title=f"PR {number}",
            html_url=f"https://github.com/acme/widgets/pull/{number}",
            state=state,
        )

    return _make
