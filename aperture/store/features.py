"""Feature flag toggles persisted next to the other overlays."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

from .overlay import OverlayStore


class FeatureFlag(str, Enum):
    """Toggles that gate optional catalog behavior."""

    GIT_ACTIVITY_ENABLED = "gitActivityEnabled"
    SCORING_ENABLED = "scoringEnabled"


class FeatureFlags(Protocol):
    """Read-only view of feature toggles."""

    def is_feature_enabled(self, feature: FeatureFlag) -> bool: ...


class FeaturesStore(OverlayStore):
    """Feature toggles; every flag defaults to enabled."""

    _features: dict[str, bool]
    _last_updated: str | None

    def _restore(self, data: dict[str, Any]) -> None:
        self._features = {
            flag.value: bool(data.get(flag.value, True)) for flag in FeatureFlag
        }
        self._last_updated = data.get("lastUpdated")

    def _snapshot(self) -> dict[str, Any]:
        self._last_updated = self._clock().isoformat()
        return {**self._features, "lastUpdated": self._last_updated}

    def is_feature_enabled(self, feature: FeatureFlag) -> bool:
        self._reload()
        return self._features[FeatureFlag(feature).value]

    def toggle_feature(self, feature: FeatureFlag) -> bool:
        """Flip a flag and return its new value."""
        self._reload()
        key = FeatureFlag(feature).value
        self._features[key] = not self._features[key]
        self._persist()
        return self._features[key]

    def set_feature(self, feature: FeatureFlag, enabled: bool) -> None:
        self._reload()
        self._features[FeatureFlag(feature).value] = enabled
        self._persist()

    def all_features(self) -> dict[str, Any]:
        self._reload()
        return {**self._features, "lastUpdated": self._last_updated}
