# gitbulk GitHub Client
# Paginated repository listing through the GitHub REST API

import os
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Optional

import requests

from gitbulk.config.schema import CloneMethod


GITHUB_API = "https://api.github.com"
PER_PAGE = 100


class GitHubError(Exception):
    """Exception raised for GitHub API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class GitHubRepo:
    """A repository as listed by the GitHub API."""

    name: str
    clone_url: str
    ssh_url: str
    fork: bool = False
    private: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "GitHubRepo":
        """Create from a repository object of the REST API."""
        return cls(
            name=data["name"],
            clone_url=data.get("clone_url", ""),
            ssh_url=data.get("ssh_url", ""),
            fork=bool(data.get("fork", False)),
            private=bool(data.get("private", False)),
        )

    def url_for(self, method: CloneMethod) -> str:
        """Get the clone URL for a transport."""
        return self.ssh_url if method == CloneMethod.SSH else self.clone_url


class GitHubClient:
    """
    Minimal GitHub REST API client.

    Unauthenticated requests are limited to 60 per hour, authenticated ones
    to 5000 per hour.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        api_url: str = GITHUB_API,
        timeout: float = 30,
    ):
        """
        Initialize GitHub client.

        Args:
            token: Personal access token. If None, uses GITHUB_TOKEN env var.
            session: Optional requests session (creates new one if not provided).
            api_url: API base URL.
            timeout: Request timeout in seconds.
        """
        if token is None:
            token = os.getenv("GITHUB_TOKEN") or None

        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Accept"] = "application/vnd.github.v3+json"
        if self.token:
            self.session.headers["Authorization"] = f"token {self.token}"

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        Perform a GET request and decode the JSON body.

        Raises:
            GitHubError: On transport errors, non-200 responses or invalid JSON.
        """
        url = f"{self.api_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise GitHubError(f"Request to {url} failed: {e}")

        try:
            data = response.json()
        except ValueError:
            raise GitHubError(f"Invalid JSON from {url}", response.status_code)

        if response.status_code != 200:
            message = data.get("message") if isinstance(data, dict) else None
            raise GitHubError(message or f"HTTP {response.status_code} from {url}", response.status_code)

        return data

    def get_owner_type(self, owner: str) -> str:
        """
        Determine whether an account is a user or an organization.

        Args:
            owner: GitHub user or organization name.

        Returns:
            "users" or "orgs" (the API path segment for the account type).

        Raises:
            GitHubError: If the account does not exist or has an unknown type.
        """
        data = self._get(f"/users/{owner}")
        account_type = data.get("type")
        if account_type == "User":
            return "users"
        if account_type == "Organization":
            return "orgs"
        raise GitHubError(f"Unknown account type: {account_type}")

    def iter_repositories(self, owner: str, *, include_private: bool = False) -> Iterator[GitHubRepo]:
        """
        Yield every repository of an account, one page at a time.

        Args:
            owner: GitHub user or organization name.
            include_private: Request private repositories as well.

        Yields:
            GitHubRepo for each listed repository.
        """
        owner_type = self.get_owner_type(owner)
        page = 1

        while True:
            params = {
                "per_page": PER_PAGE,
                "page": page,
                "type": "all" if include_private else "public",
            }
            items = self._get(f"/{owner_type}/{owner}/repos", params)
            if not isinstance(items, list):
                raise GitHubError("Unexpected response: expected a list of repositories")

            for item in items:
                yield GitHubRepo.from_api(item)

            if len(items) < PER_PAGE:
                break
            page += 1

    def list_repositories(
        self,
        owner: str,
        *,
        include_forks: bool = False,
        include_private: bool = False,
    ) -> list[GitHubRepo]:
        """
        List an account's repositories, filtered by fork and visibility.

        Args:
            owner: GitHub user or organization name.
            include_forks: Keep forked repositories.
            include_private: Keep private repositories.

        Returns:
            List of repositories.
        """
        repos: list[GitHubRepo] = []
        for repo in self.iter_repositories(owner, include_private=include_private):
            if repo.fork and not include_forks:
                continue
            if repo.private and not include_private:
                continue
            repos.append(repo)
        return repos
