"""Tests for the persisted overlay stores."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from aperture.models import SourceType
from aperture.store import (
    FeatureFlag,
    FeaturesStore,
    HiddenStore,
    ImportStore,
    JsonFileStorage,
    MemoryStorage,
    OverlayStores,
)

from .conftest import make_component


def test_json_storage_missing_file_loads_as_none(tmp_path: Path) -> None:
    assert JsonFileStorage(tmp_path / "absent.json").load() is None


def test_json_storage_corrupt_file_warns(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "hidden.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        store = HiddenStore(JsonFileStorage(path))

    assert store.hidden_components() == []
    assert "Failed to load snapshot" in caplog.text


def test_json_storage_creates_directory_and_pretty_prints(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "hidden.json"
    store = HiddenStore(JsonFileStorage(path))

    store.hide_component("api")

    text = path.read_text(encoding="utf-8")
    assert '\n  "hiddenComponents"' in text
    assert json.loads(text)["hiddenComponents"] == ["api"]


def test_hide_and_unhide() -> None:
    store = OverlayStores.in_memory().hidden

    store.hide_component("api")
    assert store.is_hidden("api")

    store.unhide_component("api")
    assert not store.is_hidden("api")


def test_unhide_unknown_name_is_noop() -> None:
    store = OverlayStores.in_memory().hidden

    store.unhide_component("never-hidden")

    assert store.stats() == {"total": 0, "components": []}


def test_reads_reload_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "hidden.json"
    first = HiddenStore(JsonFileStorage(path))
    second = HiddenStore(JsonFileStorage(path))

    first.hide_component("api")

    assert second.is_hidden("api")
    assert second.hidden_components() == ["api"]


def test_import_store_latest_write_wins() -> None:
    store = OverlayStores.in_memory().imported
    store.add_imported_component(
        SourceType.GITHUB, "org/api", make_component("api", lifecycle="experimental"), "u1"
    )
    store.add_imported_component(
        SourceType.GITHUB, "org/api", make_component("api", lifecycle="production"), "u2"
    )

    entries = store.imported_components()

    assert len(entries) == 1
    assert entries[0].component.spec.lifecycle == "production"
    assert entries[0].source.url == "u2"


def test_import_store_keys_by_provider_and_repository(tmp_path: Path) -> None:
    path = tmp_path / "imported.json"
    store = ImportStore(JsonFileStorage(path))
    store.add_imported_component(SourceType.GITHUB, "org/api", make_component("api"), "u1")
    store.add_imported_component(SourceType.GITLAB, "grp/api", make_component("api"), "u2")

    data = json.loads(path.read_text(encoding="utf-8"))

    assert set(data) == {"github:org/api:api", "gitlab:grp/api:api"}
    assert data["gitlab:grp/api:api"]["source"]["type"] == "gitlab"
    assert store.get_imported_component(SourceType.GITLAB, "grp/api", "api") is not None
    assert store.find_by_component_name("api").source.type == SourceType.GITHUB


def test_import_store_clear_repository_and_stats() -> None:
    synced = datetime(2024, 5, 1, tzinfo=timezone.utc)
    store = ImportStore(MemoryStorage(), clock=lambda: synced)
    store.add_imported_component(SourceType.GITHUB, "org/a", make_component("a"), "u")
    store.add_imported_component(SourceType.GITHUB, "org/b", make_component("b"), "u")
    store.add_imported_component(SourceType.GITLAB, "grp/c", make_component("c"), "u")

    store.clear_repository(SourceType.GITHUB, "org/a")

    assert store.stats() == {
        "total": 2,
        "repositories": 2,
        "bySource": {"github": 1, "gitlab": 1},
        "lastSync": synced.isoformat(),
    }

    store.clear_imported()
    assert store.stats()["lastSync"] is None


def test_import_store_skips_malformed_entries(tmp_path: Path) -> None:
    path = tmp_path / "imported.json"
    path.write_text(json.dumps({"github:x/y:z": {"component": {}}}), encoding="utf-8")

    assert ImportStore(JsonFileStorage(path)).imported_components() == []


def test_features_default_enabled_and_toggle(tmp_path: Path) -> None:
    path = tmp_path / "features.json"
    store = FeaturesStore(JsonFileStorage(path))

    assert store.is_feature_enabled(FeatureFlag.SCORING_ENABLED)
    assert store.toggle_feature(FeatureFlag.SCORING_ENABLED) is False

    reopened = FeaturesStore(JsonFileStorage(path))
    assert not reopened.is_feature_enabled(FeatureFlag.SCORING_ENABLED)
    assert reopened.is_feature_enabled(FeatureFlag.GIT_ACTIVITY_ENABLED)

    reopened.set_feature(FeatureFlag.GIT_ACTIVITY_ENABLED, False)
    features = store.all_features()
    assert features["gitActivityEnabled"] is False
    assert features["lastUpdated"] is not None


def test_from_directory_uses_expected_files(tmp_path: Path) -> None:
    stores = OverlayStores.from_directory(tmp_path / ".aperture")
    stores.hidden.hide_component("a")
    stores.features.set_feature(FeatureFlag.SCORING_ENABLED, True)

    assert (tmp_path / ".aperture" / "hidden.json").exists()
    assert (tmp_path / ".aperture" / "features.json").exists()
