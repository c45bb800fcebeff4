"""GitHub Pull Request and Commit Client.

Fetches the pull request metadata and commit histories the hotfix engine
consumes and opens the hotfix pull request at the end of a run.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from ..config import RepositoryConfig
from ..engine.models import ChangeRequest, Commit
from .base_client import APIClientError, GitHubAPIBaseClient

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GitActor(BaseModel):
    """Author or committer of a git commit."""

    name: Optional[str] = Field(None, description="Actor name")
    email: Optional[str] = Field(None, description="Actor email")
    date: Optional[datetime] = Field(None, description="Authoring or commit timestamp")


class GitCommitDetail(BaseModel):
    """The git object part of a commit response."""

    message: str = Field(..., description="Full commit message")
    author: Optional[GitActor] = Field(None, description="Commit author")
    committer: Optional[GitActor] = Field(None, description="Commit committer")


class GitHubCommit(BaseModel):
    """Commit as returned by the commits and pull request commits endpoints."""

    sha: str = Field(..., description="Commit SHA")
    html_url: Optional[str] = Field(None, description="Web URL of the commit")
    commit: GitCommitDetail = Field(..., description="Git commit data")

    def to_commit(self) -> Commit:
        author = self.commit.author
        return Commit(
            identifier=self.sha,
            message=self.commit.message,
            author_date=author.date if author is not None else None,
            html_url=self.html_url,
        )


class GitHubPullRequest(BaseModel):
    """Pull request metadata."""

    number: int = Field(..., description="Pull request number")
    state: str = Field(..., description="open or closed")
    title: str = Field("", description="Pull request title")
    html_url: Optional[str] = Field(None, description="Web URL of the pull request")
    created_at: datetime = Field(..., description="Creation timestamp")
    merged_at: Optional[datetime] = Field(None, description="Merge timestamp")
    merged: Optional[bool] = Field(None, description="Whether the pull request was merged")

    @property
    def is_merged(self) -> bool:
        if self.merged is not None:
            return self.merged
        return self.merged_at is not None

    def to_change_request(self) -> ChangeRequest:
        return ChangeRequest(
            number=self.number,
            created_at=self.created_at,
            merged_at=self.merged_at,
            merged=self.is_merged,
            title=self.title,
            html_url=self.html_url,
            state=self.state,
        )


def _parse(model: Type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise APIClientError(
            f"Unexpected {model.__name__} payload from GitHub API", details=str(e)
        ) from e


def format_since(since: datetime) -> str:
    """Render ``since`` as the ISO-8601 UTC timestamp the API expects."""
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    return since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class GitHubAPIClient(GitHubAPIBaseClient):
    """Client for the pull request and commit endpoints of the GitHub API.

    Every operation takes the repository explicitly; the client itself holds
    no repository identity.
    """

    def get_pull_request(self, repository: RepositoryConfig, number: int) -> ChangeRequest:
        """Fetch the metadata of one pull request."""
        data = self._get_json(f"/repos/{repository.owner}/{repository.name}/pulls/{number}")
        return _parse(GitHubPullRequest, data).to_change_request()

    def list_pull_request_commits(
        self, repository: RepositoryConfig, number: int
    ) -> List[Commit]:
        """Commits of a pull request, oldest first."""
        endpoint = f"/repos/{repository.owner}/{repository.name}/pulls/{number}/commits"
        commits = [_parse(GitHubCommit, item).to_commit() for item in self._paginate(endpoint)]
        logger.debug(f"PR #{number} has {len(commits)} commits")
        return commits

    def list_branch_commits(
        self, repository: RepositoryConfig, branch: str, since: datetime
    ) -> List[Commit]:
        """Commits reachable from ``branch`` since ``since``, oldest first.

        The API lists newest first; the order is reversed here.
        """
        endpoint = f"/repos/{repository.owner}/{repository.name}/commits"
        params = {"sha": branch, "since": format_since(since)}
        commits = [
            _parse(GitHubCommit, item).to_commit()
            for item in self._paginate(endpoint, params)
        ]
        commits.reverse()
        logger.info(f"Fetched {len(commits)} commits of '{branch}' since {params['since']}")
        return commits

    def create_pull_request(
        self,
        repository: RepositoryConfig,
        title: str,
        head: str,
        base: str,
        body: str,
    ) -> str:
        """Open a pull request and return its web URL."""
        response = self._request(
            "POST",
            f"/repos/{repository.owner}/{repository.name}/pulls",
            json={"title": title, "head": head, "base": base, "body": body},
        )
        pull = _parse(GitHubPullRequest, response.json())
        logger.info(f"Opened pull request #{pull.number} from '{head}' into '{base}'")
        return pull.html_url or ""
