"""Read-only access to the local declarative entity directory."""

from __future__ import annotations

from pathlib import Path

from ..models import Component, Group
from .reader import EntityReader
from .scanner import CatalogScanner


def normalize_group_ref(ref_or_name: str) -> str:
    """Normalize a group reference to ``group:<namespace>/<name>``, lowercased.

    Accepts ``team-a``, ``group:team-a`` and ``group:ns/team-a``.
    """
    trimmed = ref_or_name.strip()

    if trimmed.lower().startswith("group:"):
        rest = trimmed[len("group:"):]
        if "/" in rest:
            namespace, name = rest.split("/", 1)
            return f"group:{(namespace or 'default').lower()}/{name.lower()}"
        return f"group:default/{rest.lower()}"

    return f"group:default/{trimmed.lower()}"


class EntityStore:
    """Components and groups parsed from a local catalog directory.

    Every call reads the directory again; nothing is cached.
    """

    def __init__(self, catalog_dir: str | Path, reader: EntityReader | None = None):
        self._scanner = CatalogScanner(catalog_dir)
        self._reader = reader or EntityReader()

    @property
    def catalog_dir(self) -> Path:
        return self._scanner.catalog_dir

    def components(self) -> list[Component]:
        return [e for e in self._entities() if isinstance(e, Component)]

    def groups(self) -> list[Group]:
        return [e for e in self._entities() if isinstance(e, Group)]

    def get_group_by_ref(self, ref_or_name: str) -> Group | None:
        """Resolve an owner reference to a local group, case-insensitively."""
        normalized = normalize_group_ref(ref_or_name)
        namespace, name = normalized.split(":", 1)[1].split("/", 1)

        for group in self.groups():
            if (
                group.metadata.namespace.lower() == namespace
                and group.metadata.name.lower() == name
            ):
                return group
        return None

    def _entities(self) -> list[Component | Group]:
        entities = []
        for _path, data in self._scanner.scan():
            entity = self._reader.parse_entity(data)
            if entity is not None:
                entities.append(entity)
        return entities
