"""Administratively hidden component names."""

from __future__ import annotations

import logging
from typing import Any

from .overlay import OverlayStore

logger = logging.getLogger(__name__)


class HiddenStore(OverlayStore):
    """Set of component names suppressed from the catalog view."""

    _hidden: dict[str, None]

    def _restore(self, data: dict[str, Any]) -> None:
        names = data.get("hiddenComponents") or []
        if not isinstance(names, list):
            logger.warning("Ignoring malformed hiddenComponents entry")
            names = []
        # dict keeps insertion order, unlike set
        self._hidden = dict.fromkeys(str(name) for name in names)

    def _snapshot(self) -> dict[str, Any]:
        return {
            "hiddenComponents": list(self._hidden),
            "lastUpdated": self._clock().isoformat(),
        }

    def hide_component(self, name: str) -> None:
        self._reload()
        self._hidden[name] = None
        self._persist()

    def unhide_component(self, name: str) -> None:
        self._reload()
        self._hidden.pop(name, None)
        self._persist()

    def is_hidden(self, name: str) -> bool:
        self._reload()
        return name in self._hidden

    def hidden_components(self) -> list[str]:
        self._reload()
        return list(self._hidden)

    def clear(self) -> None:
        self._hidden = {}
        self._persist()

    def stats(self) -> dict[str, Any]:
        self._reload()
        return {"total": len(self._hidden), "components": list(self._hidden)}
