"""Tests for the import pipeline."""

from __future__ import annotations

import base64
from typing import Callable

import httpx
import pytest

from aperture.config import ApertureConfig
from aperture.importer import ConfigurationError, ImportPipeline, ImportResult, expand_targets
from aperture.models import SourceType
from aperture.providers import GitHubClient, GitLabClient
from aperture.store import ImportStore, MemoryStorage

RESET = "1717243200"


def _descriptor(name: str) -> str:
    return (
        "apiVersion: backstage.io/v1alpha1\n"
        "kind: Component\n"
        f"metadata:\n  name: {name}\n"
        "spec:\n  type: service\n  lifecycle: production\n  owner: team-a\n"
    )


def _contents(name: str) -> dict:
    encoded = base64.b64encode(_descriptor(name).encode("utf-8")).decode("ascii")
    return {"type": "file", "encoding": "base64", "content": encoded}


def _config(**overrides) -> ApertureConfig:
    return ApertureConfig.model_validate(overrides)


def _pipeline(
    config: ApertureConfig,
    handler: Callable[[httpx.Request], httpx.Response],
    store: ImportStore | None = None,
) -> tuple[ImportPipeline, ImportStore]:
    store = store or ImportStore(MemoryStorage())

    def github(cfg):
        return GitHubClient(
            cfg.token, http_client=httpx.Client(transport=httpx.MockTransport(handler))
        )

    def gitlab(cfg):
        return GitLabClient(
            cfg.token, http_client=httpx.Client(transport=httpx.MockTransport(handler))
        )

    return ImportPipeline(config, store, github, gitlab), store


def github_api(
    repos: dict[str, str | None],
    owners: dict[str, list[str]] | None = None,
    rate_limited: set[str] | None = None,
    requested: list[str] | None = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """A small fake of the GitHub endpoints the pipeline uses."""
    owners = owners or {}
    rate_limited = rate_limited or set()

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if requested is not None:
            requested.append(path)
        parts = path.strip("/").split("/")

        if parts[0] == "orgs":
            names = owners.get(parts[1])
            if names is None:
                return httpx.Response(500)
            return httpx.Response(200, json=[{"full_name": n} for n in names])

        if parts[0] == "repos":
            repository = f"{parts[1]}/{parts[2]}"
            if repository in rate_limited:
                return httpx.Response(
                    403,
                    headers={
                        "x-ratelimit-limit": "5000",
                        "x-ratelimit-remaining": "0",
                        "x-ratelimit-reset": RESET,
                    },
                )
            if len(parts) == 3:
                return httpx.Response(200, json={"default_branch": "main"})
            name = repos.get(repository)
            if name is None:
                return httpx.Response(404)
            return httpx.Response(200, json=_contents(name))

        return httpx.Response(404)

    return handler


def _github_config(*repositories: str) -> ApertureConfig:
    return _config(github={"enabled": True, "token": "t", "repositories": list(repositories)})


def test_missing_descriptor_is_skipped() -> None:
    pipeline, store = _pipeline(
        _github_config("org/has", "org/missing"),
        github_api({"org/has": "has-svc", "org/missing": None}),
    )

    result = pipeline.import_from_github()

    assert (result.success, result.skipped, result.failed, result.total) == (1, 1, 0, 2)
    entry = store.get_imported_component(SourceType.GITHUB, "org/has", "has-svc")
    assert entry is not None
    assert entry.source.url == "https://github.com/org/has/blob/main/catalog-info.yaml"


def test_failed_wildcard_does_not_block_other_patterns() -> None:
    pipeline, store = _pipeline(
        _github_config("broken/*", "org/*"),
        github_api({"org/a": "a", "org/b": "b"}, owners={"org": ["org/a", "org/b"]}),
    )

    result = pipeline.import_from_github()

    assert result.total == 2
    assert result.success == 2
    assert [e.repository for e in result.errors] == ["broken/*"]
    assert {e.component.name for e in store.imported_components()} == {"a", "b"}


def test_rate_limit_halts_remaining_repositories() -> None:
    requested: list[str] = []
    pipeline, store = _pipeline(
        _github_config("org/a", "org/b", "org/c"),
        github_api(
            {"org/a": "a", "org/b": "b", "org/c": "c"},
            rate_limited={"org/b"},
            requested=requested,
        ),
    )

    result = pipeline.import_from_github()

    assert result.success == 1
    assert result.failed == 1
    assert result.errors[-1].repository == "all"
    assert result.errors[-1].error.startswith("Rate limit exceeded. Resets at 2024-06-01")
    assert not any("/repos/org/c" in path for path in requested)
    assert [e.component.name for e in store.imported_components()] == ["a"]


def test_invalid_repository_format_counts_as_failed() -> None:
    pipeline, _ = _pipeline(_github_config("not-a-repo"), github_api({}))

    result = pipeline.import_from_github()

    assert result.failed == 1
    assert result.errors[0].error == 'Invalid repository format. Use "owner/repo"'


def test_reimport_replaces_entry() -> None:
    store = ImportStore(MemoryStorage())
    config = _github_config("org/a")
    _pipeline(config, github_api({"org/a": "a"}), store)[0].import_from_github()
    _pipeline(config, github_api({"org/a": "a"}), store)[0].import_from_github()

    assert len(store.imported_components()) == 1


@pytest.mark.parametrize(
    ("github", "message"),
    [
        ({"enabled": False}, "not enabled"),
        ({"enabled": True, "repositories": ["org/a"]}, "token is not configured"),
        ({"enabled": True, "token": "t"}, "No repositories configured"),
    ],
)
def test_github_configuration_errors(github: dict, message: str) -> None:
    pipeline, _ = _pipeline(_config(github=github), github_api({}))

    with pytest.raises(ConfigurationError, match=message):
        pipeline.import_from_github()


def test_import_all_requires_an_enabled_provider() -> None:
    pipeline, _ = _pipeline(_config(), github_api({}))

    with pytest.raises(ConfigurationError):
        pipeline.import_all()


def test_import_all_combines_provider_results() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "gitlab.com":
            if request.url.path.endswith("/raw"):
                return httpx.Response(200, text=_descriptor("gl-svc"))
            return httpx.Response(200, json={})
        return github_api({"org/a": "gh-svc"})(request)

    config = _config(
        github={"enabled": True, "token": "t", "repositories": ["org/a"]},
        gitlab={"enabled": True, "token": "t", "projects": ["grp/web"]},
    )
    pipeline, store = _pipeline(config, handler)

    run = pipeline.import_all()

    assert set(run.results) == {SourceType.GITHUB, SourceType.GITLAB}
    assert run.combined.success == 2
    entry = store.get_imported_component(SourceType.GITLAB, "grp/web", "gl-svc")
    assert entry.source.url == "https://gitlab.com/grp/web/-/blob/main/catalog-info.yaml"


def test_gitlab_wildcard_falls_back_to_user_projects() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/api/v4/groups/"):
            return httpx.Response(404)
        if path == "/api/v4/user":
            return httpx.Response(200, json={"username": "alice"})
        if path == "/api/v4/projects" and request.url.params.get("membership") == "true":
            return httpx.Response(200, json=[{"path_with_namespace": "alice/tool"}])
        if path.endswith("/raw"):
            return httpx.Response(200, text=_descriptor("tool"))
        return httpx.Response(200, json={})

    config = _config(gitlab={"enabled": True, "token": "t", "projects": ["alice/*"]})
    pipeline, store = _pipeline(config, handler)

    result = pipeline.import_from_gitlab()

    assert (result.success, result.total) == (1, 1)
    assert store.find_by_component_name("tool").source.repository == "alice/tool"


def test_expand_targets_passes_concrete_names_through() -> None:
    expanded, errors = expand_targets(
        ["org/a", "team/*"], lambda owner: [f"{owner}/x", f"{owner}/y"]
    )

    assert expanded == ["org/a", "team/x", "team/y"]
    assert errors == []


def test_combined_result_sums_counts() -> None:
    combined = ImportResult.combine(
        [ImportResult(success=1, total=2, skipped=1), ImportResult(failed=3, total=3)]
    )

    assert combined.to_dict() == {
        "success": 1,
        "failed": 3,
        "skipped": 1,
        "total": 5,
        "errors": [],
    }


def test_gitlab_import_uses_project_default_branch() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/api/v4/projects/grp/legacy":
            return httpx.Response(200, json={"default_branch": "master"})
        if request.url.params.get("ref") != "master":
            return httpx.Response(404)
        if path.endswith("/raw"):
            return httpx.Response(200, text=_descriptor("legacy"))
        return httpx.Response(200, json={"file_name": "catalog-info.yaml"})

    config = _config(gitlab={"enabled": True, "token": "t", "projects": ["grp/legacy"]})
    pipeline, store = _pipeline(config, handler)

    result = pipeline.import_from_gitlab()

    assert (result.success, result.skipped, result.failed, result.total) == (1, 0, 0, 1)
    entry = store.get_imported_component(SourceType.GITLAB, "grp/legacy", "legacy")
    assert entry.source.url == "https://gitlab.com/grp/legacy/-/blob/master/catalog-info.yaml"
