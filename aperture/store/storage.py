"""Backing storage for overlay snapshots."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class SnapshotStorage(Protocol):
    """Whole-snapshot load/save."""

    def load(self) -> dict[str, Any] | None:
        """Return the last saved snapshot, or None when there is none."""
        ...

    def save(self, data: dict[str, Any]) -> None:
        """Replace the stored snapshot."""
        ...


class JsonFileStorage:
    """A snapshot kept as one pretty-printed JSON file.

    Read and write failures are logged and never raised.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load snapshot from {self.path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring snapshot {self.path}: not a JSON object")
            return None
        return data

    def save(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            logger.warning(f"Failed to save snapshot to {self.path}: {e}")


class MemoryStorage:
    """In-process storage that round-trips through JSON like the file backend."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._text: str | None = json.dumps(initial) if initial is not None else None

    def load(self) -> dict[str, Any] | None:
        if self._text is None:
            return None
        return json.loads(self._text)

    def save(self, data: dict[str, Any]) -> None:
        self._text = json.dumps(data)
