"""Shared provider types: errors, rate limits and the activity interface."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Protocol

import httpx

from ..models import ActivityMetrics, SourceType

CATALOG_FILENAME = "catalog-info.yaml"

# Below this many remaining calls a warning is logged
RATE_LIMIT_WARNING_THRESHOLD = 10


@dataclass
class RateLimit:
    """Rate-limit budget reported by a provider."""

    limit: int
    remaining: int
    reset: int

    @property
    def reset_at(self) -> datetime:
        return datetime.fromtimestamp(self.reset, tz=timezone.utc)

    @classmethod
    def from_headers(
        cls, headers: Mapping[str, str], prefix: str, require_all: bool = True
    ) -> "RateLimit | None":
        """Read ``<prefix>Limit``, ``<prefix>Remaining`` and ``<prefix>Reset``.

        With ``require_all`` a missing header yields None, otherwise missing
        values default to 0.
        """
        values = [headers.get(f"{prefix}{name}") for name in ("limit", "remaining", "reset")]
        if require_all and not all(values):
            return None
        try:
            limit, remaining, reset = (int(v or 0) for v in values)
        except ValueError:
            return None
        return cls(limit=limit, remaining=remaining, reset=reset)


class ProviderError(Exception):
    """A remote provider call failed."""

    RATE_LIMIT_STATUSES: frozenset[int] = frozenset()

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        rate_limit: RateLimit | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.rate_limit = rate_limit

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_rate_limited(self) -> bool:
        return (
            self.rate_limit is not None
            and self.status_code in self.RATE_LIMIT_STATUSES
        )


class ActivityProvider(Protocol):
    """Fetches activity metrics for repositories of one provider kind."""

    source_type: SourceType

    def fetch_activity(self, repository: str) -> ActivityMetrics | None:
        """Return metrics, None for an unusable repository identifier.

        Raises ProviderError or httpx errors on transport failure.
        """
        ...


def parse_last_page(response: httpx.Response) -> int | None:
    """Page number of the ``rel="last"`` entry of a response's Link header."""
    url = response.links.get("last", {}).get("url")
    if not url:
        return None
    page = httpx.URL(url).params.get("page")
    if page is None or not page.isdigit():
        return None
    return int(page)
