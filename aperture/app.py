"""Application wiring: builds every service once and shares the stores."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from .activity import ActivityMetricsService, build_activity_providers
from .catalog import CatalogAggregator, EntityStore
from .config import ApertureConfig, load_config
from .graph import DependencyGraphResolver
from .importer import ImportPipeline
from .models import ComponentScore, SourceType
from .providers import ActivityProvider
from .scoring import ScoringEngine
from .store import OverlayStores


class ApertureApp:
    """Catalog services for one project directory."""

    def __init__(
        self,
        root_path: str | Path,
        config: ApertureConfig | None = None,
        stores: OverlayStores | None = None,
        providers: dict[SourceType, ActivityProvider] | None = None,
    ):
        self._root_path = Path(root_path)
        self.config = config or load_config(self._root_path)

        self.stores = stores or OverlayStores.from_directory(
            self._resolve(self.config.data_dir),
            cache_ttl=timedelta(minutes=self.config.settings.cache_ttl_minutes),
        )
        self.entities = EntityStore(self._resolve(self.config.catalog_dir))
        self.catalog = CatalogAggregator(
            self.entities, self.stores.imported, self.stores.hidden
        )
        self.graph = DependencyGraphResolver(self.catalog)
        self.activity = ActivityMetricsService(
            self.stores.imported,
            self.stores.activity_cache,
            build_activity_providers(self.config) if providers is None else providers,
        )
        self.scoring = ScoringEngine(self.stores.features)
        self.importer = ImportPipeline(self.config, self.stores.imported)

    @classmethod
    def from_config(cls, config: ApertureConfig, root_path: str | Path) -> "ApertureApp":
        return cls(root_path, config=config)

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self._root_path / candidate

    def score_component(self, name: str) -> ComponentScore | None:
        """Score a visible component, enriched with activity when enabled."""
        component = self.catalog.get_by_name(name)
        if component is None:
            return None

        metrics = None
        if self.scoring.activity_enabled:
            metrics = self.activity.get_activity_metrics(component)
        return self.scoring.score(component, metrics)
