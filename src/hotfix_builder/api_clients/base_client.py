"""Base GitHub REST API Client.

Provides the shared HTTP session, bearer token handling, pagination and the
mapping of HTTP and transport failures onto the hotfix error hierarchy.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

import httpx

from ..config import GitHubConfig
from ..errors import UpstreamFetchError

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class APIClientError(UpstreamFetchError):
    """Base exception for API client errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message, details=details)
        self.status_code = status_code


class AuthenticationError(APIClientError):
    """Exception raised when the token is missing, invalid or lacks access."""

    pass


class NotFoundError(APIClientError):
    """Exception raised when a repository, pull request or branch does not exist."""

    pass


class RateLimitError(APIClientError):
    """Exception raised when the GitHub rate limit is exhausted."""

    pass


class NetworkError(APIClientError):
    """Exception raised when network operations fail."""

    pass


class GitHubAPIBaseClient:
    """Base API client with authentication and common HTTP functionality."""

    def __init__(
        self,
        config: GitHubConfig,
        token: str,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize base API client.

        Args:
            config: GitHub API configuration
            token: Bearer token for the API
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.config = config
        self._token = token
        self._transport = transport
        self._session: Optional[httpx.Client] = None

    @property
    def session(self) -> httpx.Client:
        """Get or create the HTTP session."""
        if self._session is None or self._session.is_closed:
            self._session = httpx.Client(
                base_url=self.config.api_url,
                timeout=httpx.Timeout(self.config.timeout),
                headers={
                    "Accept": "application/vnd.github+json",
                    "Authorization": f"Bearer {self._token}",
                    "X-GitHub-Api-Version": GITHUB_API_VERSION,
                },
                follow_redirects=True,
                transport=self._transport,
            )
        return self._session

    def close(self) -> None:
        if self._session is not None and not self._session.is_closed:
            self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise on any non-2xx response.

        Raises:
            AuthenticationError: On 401, or 403 without rate limit exhaustion
            RateLimitError: On 403/429 with an exhausted rate limit
            NotFoundError: On 404
            APIClientError: On any other error status
            NetworkError: On connection failures and timeouts
        """
        try:
            response = self.session.request(method, endpoint, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(f"GitHub API request timed out: {method} {endpoint}") from e
        except httpx.TransportError as e:
            raise NetworkError(
                f"Failed to connect to GitHub API: {method} {endpoint}", details=str(e)
            ) from e

        if response.status_code >= 400:
            self._raise_for_status(method, endpoint, response)

        return response

    def _raise_for_status(self, method: str, endpoint: str, response: httpx.Response) -> None:
        status = response.status_code
        try:
            detail = response.json().get("message")
        except (ValueError, AttributeError):
            detail = response.text or None

        message = f"GitHub API error (HTTP {status}) for {method} {endpoint}"
        logger.debug(f"{message}: {detail}")

        if status == 401:
            raise AuthenticationError(
                f"GitHub rejected the token (HTTP {status})", status_code=status, details=detail
            )
        if status in (403, 429):
            if response.headers.get("x-ratelimit-remaining") == "0" or status == 429:
                raise RateLimitError(
                    "GitHub API rate limit exceeded", status_code=status, details=detail
                )
            raise AuthenticationError(
                f"Token lacks access for {method} {endpoint}", status_code=status, details=detail
            )
        if status == 404:
            raise NotFoundError(
                f"Not found: {method} {endpoint}", status_code=status, details=detail
            )
        raise APIClientError(message, status_code=status, details=detail)

    def _get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", endpoint, params=params).json()

    def _paginate(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Any]:
        """Yield the items of a list endpoint, following ``Link: rel="next"``."""
        page_params: Dict[str, Any] = dict(params or {})
        page_params.setdefault("per_page", self.config.per_page)

        url: Optional[str] = endpoint
        request_params: Optional[Dict[str, Any]] = page_params
        pages = 0
        while url is not None:
            response = self._request("GET", url, params=request_params)
            pages += 1
            items: List[Any] = response.json()
            if not isinstance(items, list):
                raise APIClientError(
                    f"Unexpected response format for {endpoint}: {type(items).__name__}"
                )
            yield from items

            # The next link already carries every query parameter
            url = response.links.get("next", {}).get("url")
            request_params = None

        logger.debug(f"Fetched {pages} page(s) from {endpoint}")
