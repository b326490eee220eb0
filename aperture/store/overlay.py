"""Base class for small persisted key-value overlays."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

from .storage import SnapshotStorage

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OverlayStore:
    """In-memory state backed by a single snapshot.

    Public read methods call ``_reload()`` first and public write methods
    call ``_persist()`` last. There is no locking; the last writer wins.
    """

    def __init__(self, storage: SnapshotStorage, clock: Clock = utc_now):
        self._storage = storage
        self._clock = clock
        self._reload()

    @property
    def storage(self) -> SnapshotStorage:
        return self._storage

    def _reload(self) -> None:
        self._restore(self._storage.load() or {})

    def _persist(self) -> None:
        self._storage.save(self._snapshot())

    def _restore(self, data: dict[str, Any]) -> None:
        raise NotImplementedError

    def _snapshot(self) -> dict[str, Any]:
        raise NotImplementedError
