"""Derived component score models (never persisted)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ScoreTier(str, Enum):
    """Ordered quality bands, best first."""

    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"
    NEEDS_IMPROVEMENT = "needs-improvement"


class ScoreBreakdown(BaseModel):
    """Sub-scores that add up to the total."""

    metadata: int = 0
    architecture: int = 0
    lifecycle: int = 0
    activity: int = 0


class ActivityDetails(BaseModel):
    """Activity facts used for scoring and suggestions."""

    lastCommitDate: datetime | None = None
    daysSinceLastCommit: int | None = None
    isStale: bool = True
    openIssuesCount: int = 0
    openPullRequestsCount: int = 0

    @property
    def open_items(self) -> int:
        return self.openIssuesCount + self.openPullRequestsCount


class ScoreDetails(BaseModel):
    """Raw satisfaction flags behind a score."""

    hasDescription: bool
    hasThreePlusTags: bool
    hasDocumentationLink: bool
    hasOwner: bool
    isPartOfSystem: bool
    hasDependencies: bool
    lifecycle: str
    activity: ActivityDetails | None = None


class ComponentScore(BaseModel):
    """Score, tier and details for one component."""

    total: int = Field(..., description="Sum of breakdown sub-scores")
    breakdown: ScoreBreakdown
    tier: ScoreTier
    details: ScoreDetails
