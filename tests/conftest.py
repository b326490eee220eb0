"""Shared fixtures and builders."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from aperture.catalog import CatalogAggregator, EntityStore
from aperture.models import Component
from aperture.store import OverlayStores


def component_doc(
    name: str,
    *,
    type: str = "service",
    lifecycle: str = "production",
    owner: str = "group:default/team-a",
    system: str | None = None,
    depends_on: list[str] | None = None,
    description: str | None = None,
    tags: list[str] | None = None,
    links: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name}
    if description is not None:
        metadata["description"] = description
    if tags is not None:
        metadata["tags"] = tags
    if links is not None:
        metadata["links"] = links

    spec: dict[str, Any] = {"type": type, "lifecycle": lifecycle, "owner": owner}
    if system is not None:
        spec["system"] = system
    if depends_on is not None:
        spec["dependsOn"] = depends_on

    return {
        "apiVersion": "backstage.io/v1alpha1",
        "kind": "Component",
        "metadata": metadata,
        "spec": spec,
    }


def make_component(name: str, **kwargs: Any) -> Component:
    return Component.model_validate(component_doc(name, **kwargs))


def write_docs(directory: Path, filename: str, *docs: dict[str, Any]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(yaml.safe_dump_all(list(docs), sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    path = tmp_path / "catalog-data"
    path.mkdir()
    return path


@pytest.fixture
def stores() -> OverlayStores:
    return OverlayStores.in_memory()


@pytest.fixture
def aggregator(catalog_dir: Path, stores: OverlayStores) -> CatalogAggregator:
    return CatalogAggregator(EntityStore(catalog_dir), stores.imported, stores.hidden)
