"""Best-effort repository activity enrichment for imported components."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from ..config import ApertureConfig
from ..models import ActivityMetrics, Component, SourceType
from ..providers import (
    ActivityProvider,
    GitHubActivityProvider,
    GitHubClient,
    GitLabActivityProvider,
    GitLabClient,
)
from ..store import ActivityCache, ImportStore

logger = logging.getLogger(__name__)

STALE_THRESHOLD_DAYS = 90


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since_last_commit(
    last_commit_date: datetime | None, now: datetime | None = None
) -> int | None:
    """Whole days between the last commit and now, None when unknown."""
    if last_commit_date is None:
        return None
    now = now or datetime.now(timezone.utc)
    delta = abs(_as_utc(now) - _as_utc(last_commit_date))
    return delta.days


def is_stale(
    last_commit_date: datetime | None,
    threshold_days: int = STALE_THRESHOLD_DAYS,
    now: datetime | None = None,
) -> bool:
    """True when there is no known commit within ``threshold_days``."""
    if last_commit_date is None:
        return True
    now = now or datetime.now(timezone.utc)
    return _as_utc(now) - _as_utc(last_commit_date) > timedelta(days=threshold_days)


def build_activity_providers(config: ApertureConfig) -> dict[SourceType, ActivityProvider]:
    """Providers for every source that is enabled and has a credential."""
    providers: dict[SourceType, ActivityProvider] = {}
    if config.github.enabled and config.github.token:
        providers[SourceType.GITHUB] = GitHubActivityProvider(
            GitHubClient(config.github.token, base_url=config.github.base_url)
        )
    if config.gitlab.enabled and config.gitlab.token:
        providers[SourceType.GITLAB] = GitLabActivityProvider(
            GitLabClient(config.gitlab.token, base_url=config.gitlab.base_url)
        )
    return providers


class ActivityMetricsService:
    """Looks up activity metrics through the cache for imported components.

    Local-only components, unconfigured providers and provider failures all
    produce None; callers never see an exception.
    """

    def __init__(
        self,
        import_store: ImportStore,
        cache: ActivityCache,
        providers: dict[SourceType, ActivityProvider],
    ):
        self._import_store = import_store
        self._cache = cache
        self._providers = providers

    def get_activity_metrics(self, component: Component) -> ActivityMetrics | None:
        name = component.name
        imported = self._import_store.find_by_component_name(name)
        if imported is None:
            return None

        source_type = imported.source.type
        repository = imported.source.repository
        if not repository:
            return None

        cached = self._cache.get(source_type, repository, name)
        if cached is not None:
            logger.debug(f"Activity cache hit for {name}")
            return cached

        provider = self._providers.get(source_type)
        if provider is None:
            return None

        try:
            metrics = provider.fetch_activity(repository)
        except Exception as e:
            logger.warning(f"Failed to fetch git activity for {name}: {e}")
            return None

        if metrics is None:
            return None

        self._cache.set(source_type, repository, name, metrics)
        return metrics
