"""Components imported from remote providers, with provenance."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..models import Component, ImportedEntity, ImportSource, SourceType, import_key
from .overlay import OverlayStore

logger = logging.getLogger(__name__)


class ImportStore(OverlayStore):
    """Imported components keyed by ``<type>:<repository>:<name>``.

    The latest write for a key replaces the previous entry.
    """

    _components: dict[str, ImportedEntity]

    def _restore(self, data: dict[str, Any]) -> None:
        self._components = {}
        for key, raw in data.items():
            try:
                self._components[key] = ImportedEntity.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed imported entry {key}: {e}")

    def _snapshot(self) -> dict[str, Any]:
        return {
            key: entry.model_dump(mode="json", exclude_none=True)
            for key, entry in self._components.items()
        }

    def add_imported_component(
        self,
        source_type: SourceType,
        repository: str,
        component: Component,
        url: str,
    ) -> ImportedEntity:
        """Record a fetched component, replacing any entry with the same key."""
        self._reload()
        entry = ImportedEntity(
            component=component,
            source=ImportSource(type=source_type, repository=repository, url=url),
            lastSynced=self._clock(),
        )
        self._components[entry.key] = entry
        self._persist()
        return entry

    def imported_components(self) -> list[ImportedEntity]:
        self._reload()
        return list(self._components.values())

    def get_imported_component(
        self, source_type: SourceType, repository: str, name: str
    ) -> ImportedEntity | None:
        self._reload()
        return self._components.get(import_key(source_type, repository, name))

    def find_by_component_name(self, name: str) -> ImportedEntity | None:
        """First imported entry describing a component with this name."""
        for entry in self.imported_components():
            if entry.component.name == name:
                return entry
        return None

    def clear_imported(self) -> None:
        self._components = {}
        self._persist()

    def clear_repository(self, source_type: SourceType, repository: str) -> None:
        """Drop every component imported from one repository."""
        self._reload()
        prefix = import_key(source_type, repository, "")
        self._components = {
            key: entry
            for key, entry in self._components.items()
            if not key.startswith(prefix)
        }
        self._persist()

    def stats(self) -> dict[str, Any]:
        imported = self.imported_components()
        by_source: dict[str, int] = {}
        for entry in imported:
            by_source[entry.source.type.value] = by_source.get(entry.source.type.value, 0) + 1

        return {
            "total": len(imported),
            "repositories": len({entry.source.repository for entry in imported}),
            "bySource": by_source,
            "lastSync": (
                max(entry.lastSynced for entry in imported).isoformat()
                if imported
                else None
            ),
        }
