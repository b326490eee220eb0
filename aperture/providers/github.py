"""GitHub REST API client."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from ..models import ActivityMetrics, Component, SourceType
from .base import (
    CATALOG_FILENAME,
    RATE_LIMIT_WARNING_THRESHOLD,
    ProviderError,
    RateLimit,
    parse_last_page,
)

logger = logging.getLogger(__name__)


class GitHubClientError(ProviderError):
    """GitHub API call failed."""

    RATE_LIMIT_STATUSES = frozenset({403, 429})


class GitHubClient:
    """Reads repositories, catalog files and activity from the GitHub API."""

    PER_PAGE = 100
    # GitHub stops paginating search-like listings around this many items
    MAX_ESTIMATED_COUNT = 1000

    def __init__(
        self,
        token: str | None = None,
        base_url: str = "https://api.github.com",
        http_client: httpx.Client | None = None,
    ):
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=30.0)

    def close(self) -> None:
        self._http.close()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET an API path and warn when the rate-limit budget runs low."""
        response = self._http.get(
            f"{self._base_url}{path}", params=params, headers=self._headers()
        )

        rate_limit = RateLimit.from_headers(response.headers, "x-ratelimit-")
        if rate_limit and rate_limit.remaining < RATE_LIMIT_WARNING_THRESHOLD:
            logger.warning(
                f"GitHub API rate limit low: {rate_limit.remaining}/{rate_limit.limit}. "
                f"Resets at {rate_limit.reset_at.isoformat()}"
            )
        return response

    def _error_for(self, response: httpx.Response, context: str) -> GitHubClientError:
        status = response.status_code
        # a 403 is only a rate limit once the remaining budget is spent
        exhausted = status == 429 or (
            status == 403 and response.headers.get("x-ratelimit-remaining") == "0"
        )
        if exhausted:
            rate_limit = RateLimit.from_headers(
                response.headers, "x-ratelimit-", require_all=False
            )
            return GitHubClientError("GitHub API rate limit exceeded", status, rate_limit)
        if status == 401:
            return GitHubClientError(
                "GitHub authentication failed. Check your token.", 401
            )
        return GitHubClientError(
            f"{context}: {status} {response.reason_phrase}", status
        )

    def get_default_branch(self, owner: str, repo: str) -> str:
        """Default branch name, "main" when it cannot be determined."""
        try:
            response = self._get(f"/repos/{owner}/{repo}")
        except httpx.HTTPError as e:
            logger.debug(f"Failed to read default branch of {owner}/{repo}: {e}")
            return "main"
        if not response.is_success:
            return "main"
        return response.json().get("default_branch") or "main"

    def check_catalog_file_exists(self, owner: str, repo: str) -> bool:
        """Whether the catalog descriptor exists on the default branch.

        A 404 is a definite no; any other failure raises.
        """
        try:
            response = self._get(f"/repos/{owner}/{repo}/contents/{CATALOG_FILENAME}")
        except httpx.HTTPError as e:
            raise GitHubClientError(f"Failed to check catalog file: {e}") from e

        if response.status_code == 404:
            return False
        if not response.is_success:
            raise self._error_for(response, "GitHub API error")
        return True

    def fetch_catalog_file(self, owner: str, repo: str) -> Component | None:
        """Fetch and parse the catalog descriptor of a repository.

        Returns None when the file is missing or does not describe a
        Component. Raises GitHubClientError for API failures and for
        descriptors missing required fields.
        """
        try:
            response = self._get(f"/repos/{owner}/{repo}/contents/{CATALOG_FILENAME}")
            if response.status_code == 404:
                return None
            if not response.is_success:
                raise self._error_for(response, "GitHub API error")

            data = response.json()
            if not isinstance(data, dict) or data.get("type") != "file":
                raise GitHubClientError("Invalid catalog file structure")

            content = self._file_content(data)
        except httpx.HTTPError as e:
            raise GitHubClientError(f"Failed to fetch catalog file: {e}") from e

        return self._parse_descriptor(content)

    def _file_content(self, data: dict[str, Any]) -> str:
        """Decode inline base64 content, or download it when it is not inlined."""
        if data.get("encoding") == "base64" and data.get("content"):
            # GitHub returns base64 with newlines
            content_b64 = data["content"].replace("\n", "")
            return base64.b64decode(content_b64).decode("utf-8")

        download_url = data.get("download_url")
        if not download_url:
            raise GitHubClientError("Invalid catalog file structure")

        content_response = self._http.get(download_url, headers=self._headers())
        if not content_response.is_success:
            raise GitHubClientError(
                f"Failed to download catalog file: {content_response.status_code}",
                content_response.status_code,
            )
        return content_response.text

    def _parse_descriptor(self, content: str) -> Component | None:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise GitHubClientError(f"Invalid catalog file: {e}") from e

        if not isinstance(data, dict) or data.get("kind") != "Component":
            return None

        metadata = data.get("metadata") or {}
        spec = data.get("spec") or {}
        if not metadata.get("name") or not spec.get("type"):
            raise GitHubClientError(
                "Invalid catalog file: missing required fields (metadata.name or spec.type)"
            )

        try:
            return Component.model_validate(data)
        except ValidationError as e:
            raise GitHubClientError(f"Invalid catalog file: {e}") from e

    def get_rate_limit(self) -> RateLimit:
        try:
            response = self._get("/rate_limit")
        except httpx.HTTPError as e:
            raise GitHubClientError(f"Failed to get rate limit: {e}") from e
        if not response.is_success:
            raise GitHubClientError(
                f"Failed to get rate limit: {response.status_code}", response.status_code
            )
        rate = response.json().get("rate", {})
        return RateLimit(
            limit=int(rate.get("limit", 0)),
            remaining=int(rate.get("remaining", 0)),
            reset=int(rate.get("reset", 0)),
        )

    def list_repositories(self, owner: str) -> list[str]:
        """List ``owner/repo`` names of every repository of an org or user.

        Organizations are tried first. For a user, the authenticated user's
        own listing is used when it matches so private repositories are
        included.
        """
        try:
            endpoint, params = self._repository_listing(owner)

            repositories: list[str] = []
            page = 1
            while True:
                response = self._get(endpoint, params={**params, "page": page})
                if not response.is_success:
                    if response.status_code == 404:
                        raise GitHubClientError(
                            f'Owner/Organization "{owner}" not found or not accessible',
                            404,
                        )
                    raise self._error_for(
                        response, f'Failed to list repositories for "{owner}"'
                    )

                repos = response.json()
                if not repos:
                    break
                repositories.extend(repo["full_name"] for repo in repos)
                if len(repos) < self.PER_PAGE:
                    break
                page += 1

            return repositories
        except httpx.HTTPError as e:
            raise GitHubClientError(f"Failed to list repositories: {e}") from e

    def _repository_listing(self, owner: str) -> tuple[str, dict[str, Any]]:
        org_endpoint = f"/orgs/{owner}/repos"
        probe = self._get(org_endpoint, params={"per_page": 1, "type": "all"})
        if probe.status_code != 404:
            return org_endpoint, {"per_page": self.PER_PAGE, "type": "all"}

        user_response = self._get("/user")
        if user_response.is_success:
            login = user_response.json().get("login", "")
            if login.lower() == owner.lower():
                return "/user/repos", {
                    "per_page": self.PER_PAGE,
                    "visibility": "all",
                    "affiliation": "owner",
                }

        return f"/users/{owner}/repos", {"per_page": self.PER_PAGE, "type": "all"}

    def _estimate_count(self, response: httpx.Response, per_page: int, page_size: int) -> int:
        """Estimate a collection size from the Link header of its first page."""
        last_page = parse_last_page(response)
        if last_page is None:
            return page_size
        return min(last_page * per_page, self.MAX_ESTIMATED_COUNT)

    def get_repository_activity(self, owner: str, repo: str) -> ActivityMetrics:
        """Last commit date and open issue / pull request counts.

        Requests run one after another: commits, issues, pull requests.
        A non-2xx answer leaves the corresponding value at its default.
        """
        last_commit_date = None
        open_issues = 0
        open_pulls = 0

        try:
            commits_response = self._get(
                f"/repos/{owner}/{repo}/commits", params={"per_page": 1}
            )
            if commits_response.is_success:
                commits = commits_response.json()
                if commits:
                    last_commit_date = commits[0]["commit"]["author"]["date"]

            issues_response = self._get(
                f"/repos/{owner}/{repo}/issues",
                params={"state": "open", "per_page": self.PER_PAGE},
            )
            if issues_response.is_success:
                issues = issues_response.json()
                # the issues endpoint also lists pull requests
                actual_issues = [i for i in issues if not i.get("pull_request")]
                open_issues = len(actual_issues)
                if len(issues) == self.PER_PAGE:
                    open_issues = self._estimate_count(
                        issues_response, self.PER_PAGE, open_issues
                    )

            pulls_response = self._get(
                f"/repos/{owner}/{repo}/pulls", params={"state": "open", "per_page": 1}
            )
            if pulls_response.is_success:
                open_pulls = self._estimate_count(
                    pulls_response, 1, len(pulls_response.json())
                )
        except httpx.HTTPError as e:
            raise GitHubClientError(f"Failed to fetch repository activity: {e}") from e

        return ActivityMetrics(
            lastCommitDate=last_commit_date,
            openIssuesCount=open_issues,
            openPullRequestsCount=open_pulls,
            source=SourceType.GITHUB,
        )


class GitHubActivityProvider:
    """Activity metrics for ``owner/repo`` identifiers."""

    source_type = SourceType.GITHUB

    def __init__(self, client: GitHubClient):
        self._client = client

    def fetch_activity(self, repository: str) -> ActivityMetrics | None:
        owner, _, repo = repository.partition("/")
        if not owner or not repo:
            return None
        return self._client.get_repository_activity(owner, repo)
