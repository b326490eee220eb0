"""Tests for the GitHub client against a mocked API."""

from __future__ import annotations

import base64
from typing import Callable

import httpx
import pytest

from aperture.providers import GitHubClient, GitHubClientError, parse_last_page

DESCRIPTOR = """\
apiVersion: backstage.io/v1alpha1
kind: Component
metadata:
  name: api
  description: Public API
spec:
  type: service
  lifecycle: production
  owner: team-a
"""


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> GitHubClient:
    return GitHubClient(
        "token",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def _contents(text: str) -> dict:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    # split across lines like the real API
    return {
        "type": "file",
        "encoding": "base64",
        "content": "\n".join(encoded[i : i + 20] for i in range(0, len(encoded), 20)),
    }


def test_fetch_catalog_file_decodes_content() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        assert request.url.path == "/repos/org/api/contents/catalog-info.yaml"
        return httpx.Response(200, json=_contents(DESCRIPTOR))

    component = _client(handler).fetch_catalog_file("org", "api")

    assert component is not None
    assert component.name == "api"
    assert component.metadata.description == "Public API"
    assert seen[0].headers["Authorization"] == "Bearer token"


def test_fetch_catalog_file_missing_returns_none() -> None:
    client = _client(lambda request: httpx.Response(404, json={"message": "Not Found"}))

    assert client.fetch_catalog_file("org", "api") is None
    assert client.check_catalog_file_exists("org", "api") is False


def test_fetch_catalog_file_other_kind_returns_none() -> None:
    text = "kind: API\nmetadata:\n  name: x\nspec:\n  type: openapi\n"
    client = _client(lambda request: httpx.Response(200, json=_contents(text)))

    assert client.fetch_catalog_file("org", "api") is None


def test_fetch_catalog_file_missing_fields_raises() -> None:
    text = "kind: Component\nmetadata:\n  name: x\nspec:\n  owner: team\n"
    client = _client(lambda request: httpx.Response(200, json=_contents(text)))

    with pytest.raises(GitHubClientError, match="missing required fields"):
        client.fetch_catalog_file("org", "api")


def test_fetch_catalog_file_follows_download_url() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "raw.example.com":
            return httpx.Response(200, text=DESCRIPTOR)
        return httpx.Response(
            200,
            json={"type": "file", "download_url": "https://raw.example.com/api.yaml"},
        )

    component = _client(handler).fetch_catalog_file("org", "api")

    assert component is not None and component.name == "api"


def test_check_catalog_file_raises_on_server_error() -> None:
    client = _client(lambda request: httpx.Response(500))

    with pytest.raises(GitHubClientError) as excinfo:
        client.check_catalog_file_exists("org", "api")

    assert excinfo.value.status_code == 500
    assert not excinfo.value.is_rate_limited


def test_exhausted_rate_limit_is_classified() -> None:
    headers = {
        "x-ratelimit-limit": "5000",
        "x-ratelimit-remaining": "0",
        "x-ratelimit-reset": "1717243200",
    }
    client = _client(lambda request: httpx.Response(403, headers=headers))

    with pytest.raises(GitHubClientError) as excinfo:
        client.check_catalog_file_exists("org", "api")

    error = excinfo.value
    assert error.is_rate_limited
    assert error.rate_limit.reset == 1717243200


def test_forbidden_without_exhausted_budget_is_not_rate_limit() -> None:
    headers = {"x-ratelimit-remaining": "4000"}
    client = _client(lambda request: httpx.Response(403, headers=headers))

    with pytest.raises(GitHubClientError) as excinfo:
        client.check_catalog_file_exists("org", "api")

    assert not excinfo.value.is_rate_limited


def test_default_branch_falls_back_to_main() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/repos/org/api":
            return httpx.Response(200, json={"default_branch": "trunk"})
        return httpx.Response(404)

    client = _client(handler)

    assert client.get_default_branch("org", "api") == "trunk"
    assert client.get_default_branch("org", "other") == "main"


def test_list_repositories_for_organization_paginates() -> None:
    first_page = [{"full_name": f"org/r{i}"} for i in range(GitHubClient.PER_PAGE)]

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/orgs/org/repos"
        page = request.url.params.get("page")
        if page is None:
            return httpx.Response(200, json=first_page[:1])
        if page == "1":
            return httpx.Response(200, json=first_page)
        return httpx.Response(200, json=[{"full_name": "org/last"}])

    repositories = _client(handler).list_repositories("org")

    assert len(repositories) == GitHubClient.PER_PAGE + 1
    assert repositories[-1] == "org/last"


def test_list_repositories_for_authenticated_user() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/orgs/alice/repos":
            return httpx.Response(404)
        if path == "/user":
            return httpx.Response(200, json={"login": "Alice"})
        if path == "/user/repos":
            assert request.url.params["affiliation"] == "owner"
            return httpx.Response(200, json=[{"full_name": "alice/private"}])
        return httpx.Response(500)

    assert _client(handler).list_repositories("alice") == ["alice/private"]


def test_list_repositories_unknown_owner() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/user":
            return httpx.Response(200, json={"login": "someone-else"})
        return httpx.Response(404)

    with pytest.raises(GitHubClientError, match="not found or not accessible"):
        _client(handler).list_repositories("ghost")


def test_parse_last_page() -> None:
    header = (
        '<https://api.github.com/repos/o/r/pulls?per_page=1&page=2>; rel="next", '
        '<https://api.github.com/repos/o/r/pulls?per_page=1&page=42>; rel="last"'
    )

    assert parse_last_page(httpx.Response(200, headers={"link": header})) == 42
    assert parse_last_page(httpx.Response(200)) is None
    next_only = httpx.Response(200, headers={"link": '<https://x.test/?page=2>; rel="next"'})
    assert parse_last_page(next_only) is None


def test_repository_activity() -> None:
    issues = [{"number": 1}, {"number": 2, "pull_request": {}}, {"number": 3}]

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/commits"):
            return httpx.Response(
                200, json=[{"commit": {"author": {"date": "2024-05-20T10:00:00Z"}}}]
            )
        if path.endswith("/issues"):
            return httpx.Response(200, json=issues)
        if path.endswith("/pulls"):
            link = '<https://api.github.com/repos/org/api/pulls?per_page=1&page=7>; rel="last"'
            return httpx.Response(200, json=[{"number": 2}], headers={"link": link})
        return httpx.Response(404)

    metrics = _client(handler).get_repository_activity("org", "api")

    assert metrics.lastCommitDate.isoformat().startswith("2024-05-20T10:00:00")
    assert metrics.openIssuesCount == 2
    assert metrics.openPullRequestsCount == 7


def test_repository_activity_tolerates_failed_endpoints() -> None:
    metrics = _client(lambda request: httpx.Response(409)).get_repository_activity(
        "org", "empty"
    )

    assert metrics.lastCommitDate is None
    assert metrics.openIssuesCount == 0
    assert metrics.openPullRequestsCount == 0


def test_transport_errors_are_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GitHubClientError, match="Failed to fetch catalog file"):
        _client(handler).fetch_catalog_file("org", "api")


def test_get_rate_limit() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/rate_limit"
        return httpx.Response(
            200, json={"rate": {"limit": 5000, "remaining": 4990, "reset": 1717243200}}
        )

    rate_limit = _client(handler).get_rate_limit()

    assert rate_limit.remaining == 4990
    assert rate_limit.reset_at.isoformat() == "2024-06-01T12:00:00+00:00"
