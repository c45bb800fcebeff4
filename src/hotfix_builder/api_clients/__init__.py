"""API Client Abstractions for GitHub.

All HTTP functionality is contained within dedicated API client classes; the
services and the engine never issue raw HTTP calls.
"""

from .base_client import (
    GitHubAPIBaseClient,
    APIClientError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    NetworkError,
)
from .github_client import (
    GitHubAPIClient,
    GitHubCommit,
    GitHubPullRequest,
    format_since,
)

__all__ = [
    # Base client
    "GitHubAPIBaseClient",
    "APIClientError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "NetworkError",
    # GitHub client
    "GitHubAPIClient",
    "GitHubCommit",
    "GitHubPullRequest",
    "format_since",
]
