"""Persisted overlay stores layered on top of the local catalog."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from .activity_cache import DEFAULT_TTL, ActivityCache
from .features import FeatureFlag, FeatureFlags, FeaturesStore
from .hidden import HiddenStore
from .imported import ImportStore
from .overlay import OverlayStore
from .storage import JsonFileStorage, MemoryStorage, SnapshotStorage


@dataclass
class OverlayStores:
    """The four overlay stores, constructed once and passed around."""

    hidden: HiddenStore
    imported: ImportStore
    activity_cache: ActivityCache
    features: FeaturesStore

    @classmethod
    def from_directory(
        cls, data_dir: str | Path, cache_ttl: timedelta = DEFAULT_TTL
    ) -> "OverlayStores":
        """Back every store with a JSON file inside ``data_dir``."""
        data_dir = Path(data_dir)
        return cls(
            hidden=HiddenStore(JsonFileStorage(data_dir / "hidden.json")),
            imported=ImportStore(JsonFileStorage(data_dir / "imported.json")),
            activity_cache=ActivityCache(
                JsonFileStorage(data_dir / "git-activity-cache.json"), ttl=cache_ttl
            ),
            features=FeaturesStore(JsonFileStorage(data_dir / "features.json")),
        )

    @classmethod
    def in_memory(cls, cache_ttl: timedelta = DEFAULT_TTL) -> "OverlayStores":
        return cls(
            hidden=HiddenStore(MemoryStorage()),
            imported=ImportStore(MemoryStorage()),
            activity_cache=ActivityCache(MemoryStorage(), ttl=cache_ttl),
            features=FeaturesStore(MemoryStorage()),
        )


__all__ = [
    "ActivityCache",
    "DEFAULT_TTL",
    "FeatureFlag",
    "FeatureFlags",
    "FeaturesStore",
    "HiddenStore",
    "ImportStore",
    "JsonFileStorage",
    "MemoryStorage",
    "OverlayStore",
    "OverlayStores",
    "SnapshotStorage",
]
