"""GitLab REST API client."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
import yaml

from ..catalog.reader import EntityReader
from ..models import ActivityMetrics, Component, SourceType
from .base import CATALOG_FILENAME, ProviderError, RateLimit

logger = logging.getLogger(__name__)


class GitLabClientError(ProviderError):
    """GitLab API call failed."""

    RATE_LIMIT_STATUSES = frozenset({429})


def _encode(path: str) -> str:
    return quote(path, safe="")


class GitLabClient:
    """Reads projects, catalog files and activity from the GitLab API.

    Every non-2xx answer raises GitLabClientError with the rate-limit
    headers attached when present.
    """

    PER_PAGE = 100

    def __init__(
        self,
        token: str,
        base_url: str = "https://gitlab.com/api/v4",
        http_client: httpx.Client | None = None,
    ):
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=30.0)
        self._reader = EntityReader()

    def close(self) -> None:
        self._http.close()

    def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> httpx.Response:
        try:
            response = self._http.get(
                f"{self._base_url}{endpoint}",
                params=params,
                headers={"PRIVATE-TOKEN": self._token},
            )
        except httpx.HTTPError as e:
            raise GitLabClientError(f"GitLab request failed: {e}") from e

        if not response.is_success:
            raise GitLabClientError(
                f"GitLab API error: {response.reason_phrase}",
                response.status_code,
                RateLimit.from_headers(response.headers, "ratelimit-"),
            )
        return response

    def get_default_branch(self, project_path: str) -> str:
        """Default branch name, "main" when it cannot be determined.

        Rate-limit errors still raise.
        """
        try:
            project = self._get(f"/projects/{_encode(project_path)}").json()
        except GitLabClientError as e:
            if e.is_rate_limited:
                raise
            logger.debug(f"Failed to read default branch of {project_path}: {e}")
            return "main"
        return project.get("default_branch") or "main"

    def check_catalog_file_exists(self, project_path: str, ref: str = "main") -> bool:
        try:
            self._get(
                f"/projects/{_encode(project_path)}/repository/files/{_encode(CATALOG_FILENAME)}",
                params={"ref": ref},
            )
            return True
        except GitLabClientError as e:
            if e.is_not_found:
                return False
            raise

    def fetch_catalog_file(self, project_path: str, ref: str = "main") -> Component | None:
        """Fetch the raw descriptor; None if missing or not a Component."""
        try:
            response = self._get(
                f"/projects/{_encode(project_path)}/repository/files/"
                f"{_encode(CATALOG_FILENAME)}/raw",
                params={"ref": ref},
            )
        except GitLabClientError as e:
            if e.is_not_found:
                return None
            raise

        try:
            return self._reader.parse_component(response.text)
        except yaml.YAMLError as e:
            raise GitLabClientError(f"Invalid catalog file: {e}") from e

    def _paginate(self, endpoint: str, params: dict[str, Any] | None = None) -> list[str]:
        """Collect ``path_with_namespace`` across pages until a short page."""
        projects: list[str] = []
        page = 1
        while True:
            response = self._get(
                endpoint, params={**(params or {}), "per_page": self.PER_PAGE, "page": page}
            )
            data = response.json()
            if not data:
                break
            projects.extend(p["path_with_namespace"] for p in data)
            if len(data) < self.PER_PAGE:
                break
            page += 1
        return projects

    def list_group_projects(self, group_path: str) -> list[str]:
        return self._paginate(
            f"/groups/{_encode(group_path)}/projects", {"include_subgroups": "true"}
        )

    def list_user_projects(self, username: str) -> list[str]:
        return self._paginate(f"/users/{_encode(username)}/projects")

    def list_authenticated_user_projects(self) -> list[str]:
        return self._paginate("/projects", {"membership": "true"})

    def get_authenticated_user(self) -> str:
        """Username of the token owner."""
        return self._get("/user").json()["username"]

    def get_rate_limit(self) -> RateLimit | None:
        try:
            response = self._http.head(
                f"{self._base_url}/user", headers={"PRIVATE-TOKEN": self._token}
            )
        except httpx.HTTPError:
            return None
        return RateLimit.from_headers(response.headers, "ratelimit-")

    def _total(self, response: httpx.Response, per_page: int) -> int:
        """Collection size from X-Total, falling back to X-Total-Pages."""
        total = response.headers.get("x-total")
        if total and total.isdigit():
            return int(total)
        total_pages = response.headers.get("x-total-pages")
        if total_pages and total_pages.isdigit():
            return int(total_pages) * per_page
        return len(response.json())

    def get_repository_activity(self, project_path: str) -> ActivityMetrics:
        """Last commit date and open issue / merge request counts."""
        project = _encode(project_path)

        commits = self._get(
            f"/projects/{project}/repository/commits", params={"per_page": 1}
        ).json()
        last_commit_date = None
        if commits:
            last_commit_date = commits[0].get("committed_date") or commits[0].get(
                "created_at"
            )

        issues_response = self._get(
            f"/projects/{project}/issues", params={"state": "opened", "per_page": 1}
        )
        merge_requests_response = self._get(
            f"/projects/{project}/merge_requests",
            params={"state": "opened", "per_page": 1},
        )

        return ActivityMetrics(
            lastCommitDate=last_commit_date,
            openIssuesCount=self._total(issues_response, 1),
            openPullRequestsCount=self._total(merge_requests_response, 1),
            source=SourceType.GITLAB,
        )


class GitLabActivityProvider:
    """Activity metrics for ``group/project`` paths."""

    source_type = SourceType.GITLAB

    def __init__(self, client: GitLabClient):
        self._client = client

    def fetch_activity(self, repository: str) -> ActivityMetrics | None:
        if "/" not in repository:
            return None
        return self._client.get_repository_activity(repository)
