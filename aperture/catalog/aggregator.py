"""Merged, hidden-filtered view over local and imported components."""

from __future__ import annotations

from typing import Any, Literal

from ..models import Component, Group, SourceType
from ..store import HiddenStore, ImportStore
from .store import EntityStore

LOCAL_SOURCE = "local"
UNCATEGORIZED = "uncategorized"

SourceFilter = Literal["local", "all"] | SourceType | None


class CatalogAggregator:
    """Canonical catalog read API.

    Components are keyed by name. A local component replaces an imported one
    with the same name; the imported entry stays in the import store.
    Results keep the order in which the merged map was built (imported
    entries first, then new local names), which is not a recency order.
    """

    def __init__(
        self,
        entity_store: EntityStore,
        import_store: ImportStore,
        hidden_store: HiddenStore,
    ):
        self._entities = entity_store
        self._imports = import_store
        self._hidden = hidden_store

    def list_all(
        self, source_filter: SourceFilter = None, include_hidden: bool = False
    ) -> list[Component]:
        """All components visible under the given source filter.

        ``"local"`` returns only local components, a SourceType returns the
        imported components of that provider which no local component
        shadows, and ``None``/``"all"`` returns the merged catalog.
        """
        local = self._entities.components()

        if source_filter == LOCAL_SOURCE:
            components = local
        else:
            merged: dict[str, Component] = {}
            for entry in self._imports.imported_components():
                if source_filter in (None, "all") or entry.source.type == source_filter:
                    merged[entry.component.name] = entry.component

            for component in local:
                if source_filter in (None, "all"):
                    merged[component.name] = component
                else:
                    merged.pop(component.name, None)
            components = list(merged.values())

        if include_hidden:
            return components
        hidden = set(self._hidden.hidden_components())
        return [c for c in components if c.name not in hidden]

    def get_by_name(self, name: str, include_hidden: bool = False) -> Component | None:
        for component in self.list_all(include_hidden=include_hidden):
            if component.name == name:
                return component
        return None

    def source_of(self, name: str) -> str | None:
        """``"local"``, the importing provider kind, or None if unknown.

        Provenance is reported whether or not the component is hidden.
        """
        if any(c.name == name for c in self._entities.components()):
            return LOCAL_SOURCE
        imported = self._imports.find_by_component_name(name)
        if imported is not None:
            return imported.source.type.value
        return None

    def owner_group(self, component: Component) -> Group | None:
        """Resolve a ``group:`` owner reference against local groups."""
        owner = component.spec.owner
        if ":" in owner and not owner.lower().startswith("group:"):
            return None
        return self._entities.get_group_by_ref(owner)

    def stats(self) -> dict[str, Any]:
        components = self.list_all()
        by_type: dict[str, int] = {}
        by_lifecycle: dict[str, int] = {}
        for component in components:
            by_type[component.spec.type] = by_type.get(component.spec.type, 0) + 1
            by_lifecycle[component.spec.lifecycle] = (
                by_lifecycle.get(component.spec.lifecycle, 0) + 1
            )
        return {"total": len(components), "byType": by_type, "byLifecycle": by_lifecycle}

    def recent(self, limit: int = 6) -> list[Component]:
        """First ``limit`` components in catalog order."""
        return self.list_all()[:limit]

    def all_systems(self) -> list[str]:
        return sorted({c.spec.system for c in self.list_all() if c.spec.system})

    def by_system(self, system_name: str) -> list[Component]:
        """Components of a system; ``"uncategorized"`` also matches no system."""
        return [
            c
            for c in self.list_all()
            if (c.spec.system or UNCATEGORIZED) == system_name
        ]

    def system_stats(self) -> dict[str, dict[str, Any]]:
        stats: dict[str, dict[str, Any]] = {}
        for component in self.list_all():
            system = component.spec.system or UNCATEGORIZED
            entry = stats.setdefault(system, {"count": 0, "types": {}})
            entry["count"] += 1
            types = entry["types"]
            types[component.spec.type] = types.get(component.spec.type, 0) + 1
        return stats

    def hidden_with_data(self) -> list[Component]:
        """Hidden components that still exist in the unfiltered catalog.

        Stale hidden names are left out of the result but stay in the store.
        """
        everything = {c.name: c for c in self.list_all(include_hidden=True)}
        return [
            everything[name]
            for name in self._hidden.hidden_components()
            if name in everything
        ]

    def hide_component(self, name: str) -> None:
        self._hidden.hide_component(name)

    def unhide_component(self, name: str) -> None:
        self._hidden.unhide_component(name)

    def is_hidden(self, name: str) -> bool:
        return self._hidden.is_hidden(name)
