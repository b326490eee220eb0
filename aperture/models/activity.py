"""Repository activity models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from .imported import SourceType


class ActivityMetrics(BaseModel):
    """Commit and open-item signals for one repository.

    ``openPullRequestsCount`` also holds GitLab merge requests.
    """

    lastCommitDate: datetime | None = None
    openIssuesCount: int = 0
    openPullRequestsCount: int = 0
    source: SourceType


class CachedActivityMetrics(ActivityMetrics):
    """Activity metrics with the time they were written to the cache."""

    cachedAt: datetime

    def to_metrics(self) -> ActivityMetrics:
        return ActivityMetrics.model_validate(self.model_dump(exclude={"cachedAt"}))
