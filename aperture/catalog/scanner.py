"""Scan the local catalog directory for YAML entity documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import yaml

logger = logging.getLogger(__name__)


class CatalogScanner:
    """Scan catalog directory for YAML entity documents."""

    SUFFIXES = (".yaml", ".yml")

    def __init__(self, catalog_dir: str | Path):
        self.catalog_dir = Path(catalog_dir)

    def files(self) -> list[Path]:
        """List entity files in name order.

        A missing directory is an empty catalog; any other listing error
        propagates.
        """
        if not self.catalog_dir.exists():
            return []
        return sorted(
            path
            for path in self.catalog_dir.iterdir()
            if path.is_file() and path.suffix.lower() in self.SUFFIXES
        )

    def scan(self) -> Iterator[tuple[Path, dict]]:
        """Yield (file_path, document) for every YAML document in every file."""
        for yaml_file in self.files():
            try:
                with open(yaml_file, encoding="utf-8") as f:
                    documents = list(yaml.safe_load_all(f))
            except (yaml.YAMLError, OSError) as e:
                logger.warning(f"Failed to parse {yaml_file}: {e}")
                continue

            for data in documents:
                if data and isinstance(data, dict):
                    yield yaml_file, data
