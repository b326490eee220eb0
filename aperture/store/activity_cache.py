"""Persisted, time-limited cache of repository activity metrics."""

from __future__ import annotations

import logging
from datetime import timedelta, timezone
from typing import Any

from pydantic import ValidationError

from ..models import ActivityMetrics, CachedActivityMetrics, SourceType, import_key
from .overlay import Clock, OverlayStore, utc_now
from .storage import SnapshotStorage

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=60)


class ActivityCache(OverlayStore):
    """Activity metrics keyed by ``<type>:<repository>:<component>``.

    Entries older than the TTL are evicted when read; nothing sweeps them
    in the background.
    """

    _entries: dict[str, CachedActivityMetrics]

    def __init__(
        self,
        storage: SnapshotStorage,
        ttl: timedelta = DEFAULT_TTL,
        clock: Clock = utc_now,
    ):
        self.ttl = ttl
        super().__init__(storage, clock)

    def _restore(self, data: dict[str, Any]) -> None:
        self._entries = {}
        for key, raw in data.items():
            try:
                self._entries[key] = CachedActivityMetrics.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed cache entry {key}: {e}")

    def _snapshot(self) -> dict[str, Any]:
        return {
            key: entry.model_dump(mode="json")
            for key, entry in self._entries.items()
        }

    def _is_expired(self, entry: CachedActivityMetrics) -> bool:
        cached_at = entry.cachedAt
        if cached_at.tzinfo is None:
            cached_at = cached_at.replace(tzinfo=timezone.utc)
        return self._clock() - cached_at > self.ttl

    def get(
        self, source_type: SourceType, repository: str, component_name: str
    ) -> ActivityMetrics | None:
        self._reload()
        key = import_key(source_type, repository, component_name)
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._is_expired(entry):
            logger.debug(f"Evicting expired activity metrics for {key}")
            del self._entries[key]
            self._persist()
            return None

        return entry.to_metrics()

    def set(
        self,
        source_type: SourceType,
        repository: str,
        component_name: str,
        metrics: ActivityMetrics,
    ) -> None:
        self._reload()
        key = import_key(source_type, repository, component_name)
        self._entries[key] = CachedActivityMetrics(
            **metrics.model_dump(), cachedAt=self._clock()
        )
        self._persist()

    def clear(self) -> None:
        self._entries = {}
        self._persist()

    def keys(self) -> list[str]:
        self._reload()
        return list(self._entries)
