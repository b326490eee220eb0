"""Import catalog descriptors from GitHub and GitLab into the import store."""

from __future__ import annotations

import logging
from contextlib import closing
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Iterable

from ..config import ApertureConfig, GitHubConfig, GitLabConfig
from ..models import Component, SourceType
from ..providers import (
    CATALOG_FILENAME,
    GitHubClient,
    GitLabClient,
    GitLabClientError,
    ProviderError,
)
from ..store import ImportStore

logger = logging.getLogger(__name__)

ALL_REPOSITORIES = "all"


class ConfigurationError(Exception):
    """A provider cannot be imported from as configured."""

    pass


@dataclass
class ImportFailure:
    """One failed repository or target pattern."""

    repository: str
    error: str


@dataclass
class ImportResult:
    """Counts and errors of an import run."""

    success: int = 0
    failed: int = 0
    skipped: int = 0
    total: int = 0
    errors: list[ImportFailure] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def combine(cls, results: Iterable["ImportResult"]) -> "ImportResult":
        combined = cls()
        for result in results:
            combined.success += result.success
            combined.failed += result.failed
            combined.skipped += result.skipped
            combined.total += result.total
            combined.errors.extend(result.errors)
        return combined


@dataclass
class ImportRun:
    """Per-provider results of one import trigger."""

    results: dict[SourceType, ImportResult] = field(default_factory=dict)

    @property
    def combined(self) -> ImportResult:
        return ImportResult.combine(self.results.values())


def expand_targets(
    patterns: list[str], list_owner: Callable[[str], list[str]]
) -> tuple[list[str], list[ImportFailure]]:
    """Expand ``owner/*`` patterns into concrete repository identifiers.

    Other patterns pass through unchanged. A failing expansion is recorded
    against its pattern and the remaining patterns are still expanded.
    """
    expanded: list[str] = []
    errors: list[ImportFailure] = []

    for pattern in patterns:
        if not pattern.endswith("/*"):
            expanded.append(pattern)
            continue

        owner = pattern[:-2]
        try:
            expanded.extend(list_owner(owner))
        except Exception as e:
            logger.warning(f"Failed to expand {pattern}: {e}")
            errors.append(ImportFailure(repository=pattern, error=str(e)))

    return expanded, errors


def _rate_limit_failure(error: ProviderError) -> ImportFailure:
    reset = error.rate_limit.reset_at.isoformat() if error.rate_limit else "unknown"
    return ImportFailure(
        repository=ALL_REPOSITORIES, error=f"Rate limit exceeded. Resets at {reset}"
    )


class ImportPipeline:
    """Fetches catalog descriptors from configured repositories.

    Repositories are processed one at a time. A rate-limit error stops the
    rest of that provider's run; earlier imports are kept.
    """

    def __init__(
        self,
        config: ApertureConfig,
        import_store: ImportStore,
        github_client_factory: Callable[[GitHubConfig], GitHubClient] | None = None,
        gitlab_client_factory: Callable[[GitLabConfig], GitLabClient] | None = None,
    ):
        self._config = config
        self._store = import_store
        self._github_client_factory = github_client_factory or (
            lambda cfg: GitHubClient(cfg.token, base_url=cfg.base_url)
        )
        self._gitlab_client_factory = gitlab_client_factory or (
            lambda cfg: GitLabClient(cfg.token or "", base_url=cfg.base_url)
        )

    def import_all(self) -> ImportRun:
        """Import from every enabled provider."""
        run = ImportRun()
        if self._config.github.enabled:
            run.results[SourceType.GITHUB] = self.import_from_github()
        if self._config.gitlab.enabled:
            run.results[SourceType.GITLAB] = self.import_from_gitlab()
        if not run.results:
            raise ConfigurationError("No import source is enabled in configuration")
        return run

    def import_from_github(self) -> ImportResult:
        cfg = self._config.github
        if not cfg.enabled:
            raise ConfigurationError("GitHub integration is not enabled in configuration")
        if not cfg.token:
            raise ConfigurationError(
                "GitHub token is not configured. Set GITHUB_TOKEN environment variable."
            )
        if not cfg.repositories:
            raise ConfigurationError(
                "No repositories configured. Add repositories to aperture.yaml"
            )

        with closing(self._github_client_factory(cfg)) as client:
            repositories, expansion_errors = expand_targets(
                cfg.repositories, client.list_repositories
            )
            result = ImportResult(total=len(repositories), errors=list(expansion_errors))

            for repository in repositories:
                owner, _, repo = repository.partition("/")
                if not owner or not repo or "/" in repo:
                    result.failed += 1
                    result.errors.append(
                        ImportFailure(
                            repository=repository,
                            error='Invalid repository format. Use "owner/repo"',
                        )
                    )
                    continue

                def fetch(owner: str = owner, repo: str = repo) -> tuple[Component, str] | None:
                    if not client.check_catalog_file_exists(owner, repo):
                        return None
                    component = client.fetch_catalog_file(owner, repo)
                    if component is None:
                        return None
                    branch = client.get_default_branch(owner, repo)
                    url = f"{cfg.web_url.rstrip('/')}/{owner}/{repo}/blob/{branch}/{CATALOG_FILENAME}"
                    return component, url

                if not self._process(SourceType.GITHUB, repository, fetch, result):
                    break

        self._log_result(SourceType.GITHUB, result)
        return result

    def import_from_gitlab(self) -> ImportResult:
        cfg = self._config.gitlab
        if not cfg.enabled:
            raise ConfigurationError("GitLab integration is not enabled in configuration")
        if not cfg.token:
            raise ConfigurationError(
                "GitLab token is not configured. Set GITLAB_TOKEN environment variable."
            )
        if not cfg.projects:
            raise ConfigurationError(
                "No projects configured. Add projects to aperture.yaml"
            )

        with closing(self._gitlab_client_factory(cfg)) as client:
            projects, expansion_errors = expand_targets(
                cfg.projects, lambda owner: self._list_gitlab_owner(client, owner)
            )
            result = ImportResult(total=len(projects), errors=list(expansion_errors))

            for project_path in projects:

                def fetch(project_path: str = project_path) -> tuple[Component, str] | None:
                    branch = client.get_default_branch(project_path)
                    if not client.check_catalog_file_exists(project_path, ref=branch):
                        return None
                    component = client.fetch_catalog_file(project_path, ref=branch)
                    if component is None:
                        return None
                    url = f"{cfg.web_url.rstrip('/')}/{project_path}/-/blob/{branch}/{CATALOG_FILENAME}"
                    return component, url

                if not self._process(SourceType.GITLAB, project_path, fetch, result):
                    break

        self._log_result(SourceType.GITLAB, result)
        return result

    def _list_gitlab_owner(self, client: GitLabClient, owner: str) -> list[str]:
        """Projects of a group, or of a user when no such group exists."""
        try:
            return client.list_group_projects(owner)
        except GitLabClientError as group_error:
            if not group_error.is_not_found:
                raise
            try:
                if client.get_authenticated_user() == owner:
                    return client.list_authenticated_user_projects()
                return client.list_user_projects(owner)
            except GitLabClientError:
                raise group_error

    def _process(
        self,
        source_type: SourceType,
        repository: str,
        fetch: Callable[[], tuple[Component, str] | None],
        result: ImportResult,
    ) -> bool:
        """Import one repository into ``result``.

        Returns False when the provider's run must stop.
        """
        try:
            fetched = fetch()
        except ProviderError as e:
            result.failed += 1
            result.errors.append(ImportFailure(repository=repository, error=e.message))
            if e.is_rate_limited:
                logger.warning(f"{source_type.value} rate limit hit at {repository}, stopping")
                result.errors.append(_rate_limit_failure(e))
                return False
            return True
        except Exception as e:
            logger.warning(f"Error importing {repository}: {e}")
            result.failed += 1
            result.errors.append(ImportFailure(repository=repository, error=str(e)))
            return True

        if fetched is None:
            result.skipped += 1
            return True

        component, url = fetched
        self._store.add_imported_component(source_type, repository, component, url)
        logger.info(f"Imported {component.name} from {source_type.value}:{repository}")
        result.success += 1
        return True

    def _log_result(self, source_type: SourceType, result: ImportResult) -> None:
        logger.info(
            f"{source_type.value} import finished: {result.success} imported, "
            f"{result.skipped} skipped, {result.failed} failed of {result.total}"
        )
