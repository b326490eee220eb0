"""Component quality scoring."""

from __future__ import annotations

from datetime import datetime

from ..activity import days_since_last_commit, is_stale
from ..models import (
    ActivityDetails,
    ActivityMetrics,
    Component,
    ComponentScore,
    ScoreBreakdown,
    ScoreDetails,
    ScoreTier,
)
from ..store import FeatureFlag, FeatureFlags

METADATA_POINTS = 10
ARCHITECTURE_POINTS = 15
LIFECYCLE_POINTS = {"production": 30, "experimental": 15}
MIN_TAGS = 3

RECENT_COMMIT_DAYS = 30
ACTIVE_COMMIT_DAYS = 90
RECENT_ACTIVITY_POINTS = 25
ACTIVE_ACTIVITY_POINTS = 15
OPEN_ITEMS_THRESHOLD = 10
OPEN_ITEMS_PENALTY = 5

# Inclusive lower bounds, best tier first
TIER_THRESHOLDS = (
    (80, ScoreTier.GOLD),
    (60, ScoreTier.SILVER),
    (40, ScoreTier.BRONZE),
)

TIER_LABELS = {
    ScoreTier.GOLD: "Gold",
    ScoreTier.SILVER: "Silver",
    ScoreTier.BRONZE: "Bronze",
    ScoreTier.NEEDS_IMPROVEMENT: "Needs Improvement",
}


def get_score_tier(total: int) -> ScoreTier:
    for threshold, tier in TIER_THRESHOLDS:
        if total >= threshold:
            return tier
    return ScoreTier.NEEDS_IMPROVEMENT


def get_score_tier_label(tier: ScoreTier) -> str:
    return TIER_LABELS[tier]


def _activity_details(metrics: ActivityMetrics, now: datetime | None) -> ActivityDetails:
    return ActivityDetails(
        lastCommitDate=metrics.lastCommitDate,
        daysSinceLastCommit=days_since_last_commit(metrics.lastCommitDate, now),
        isStale=is_stale(metrics.lastCommitDate, now=now),
        openIssuesCount=metrics.openIssuesCount,
        openPullRequestsCount=metrics.openPullRequestsCount,
    )


def _activity_score(details: ActivityDetails) -> int:
    days = details.daysSinceLastCommit
    if days is None:
        score = 0
    elif days < RECENT_COMMIT_DAYS:
        score = RECENT_ACTIVITY_POINTS
    elif days < ACTIVE_COMMIT_DAYS:
        score = ACTIVE_ACTIVITY_POINTS
    else:
        score = 0

    if details.open_items > OPEN_ITEMS_THRESHOLD:
        score = max(0, score - OPEN_ITEMS_PENALTY)
    return score


def calculate_component_score(
    component: Component,
    activity: ActivityMetrics | None = None,
    scoring_enabled: bool = True,
    activity_enabled: bool = True,
    now: datetime | None = None,
) -> ComponentScore:
    """Score a component.

    Metadata (40), architecture (30) and lifecycle (30) add up to 100.
    Activity is a bonus of up to 25 on top and the total is not capped.
    With scoring disabled the total is 0 but the detail flags are still
    filled in.
    """
    metadata = component.metadata
    spec = component.spec

    details = ScoreDetails(
        hasDescription=bool(metadata.description and metadata.description.strip()),
        hasThreePlusTags=len(metadata.tags) >= MIN_TAGS,
        hasDocumentationLink=len(metadata.links) > 0,
        hasOwner=bool(spec.owner and spec.owner.strip()),
        isPartOfSystem=bool(spec.system),
        hasDependencies=len(spec.dependsOn) > 0,
        lifecycle=spec.lifecycle,
    )
    if activity_enabled and activity is not None:
        details.activity = _activity_details(activity, now)

    breakdown = ScoreBreakdown()
    if scoring_enabled:
        breakdown.metadata = METADATA_POINTS * sum(
            [
                details.hasDescription,
                details.hasThreePlusTags,
                details.hasDocumentationLink,
                details.hasOwner,
            ]
        )
        breakdown.architecture = ARCHITECTURE_POINTS * sum(
            [details.isPartOfSystem, details.hasDependencies]
        )
        breakdown.lifecycle = LIFECYCLE_POINTS.get(spec.lifecycle, 0)
        if details.activity is not None:
            breakdown.activity = _activity_score(details.activity)

    total = (
        breakdown.metadata
        + breakdown.architecture
        + breakdown.lifecycle
        + breakdown.activity
    )
    return ComponentScore(
        total=total,
        breakdown=breakdown,
        tier=get_score_tier(total),
        details=details,
    )


def get_improvement_suggestions(score: ComponentScore) -> list[str]:
    """One suggestion per unmet criterion, in checklist order."""
    details = score.details
    suggestions: list[str] = []

    if not details.hasDescription:
        suggestions.append("Add a description to explain what this component does")
    if not details.hasThreePlusTags:
        suggestions.append("Add at least 3 tags to improve discoverability")
    if not details.hasDocumentationLink:
        suggestions.append("Add a documentation link for reference")
    if not details.hasOwner:
        suggestions.append("Specify an owner or team responsible for this component")
    if not details.isPartOfSystem:
        suggestions.append("Associate this component with a system")
    if not details.hasDependencies:
        suggestions.append("Document dependencies if this component depends on others")
    if details.lifecycle != "production":
        suggestions.append("Move to production lifecycle when ready")

    if details.activity is not None:
        if details.activity.isStale:
            suggestions.append(
                "Repository has no commits in the last 90 days; confirm it is still maintained"
            )
        if details.activity.open_items > OPEN_ITEMS_THRESHOLD:
            suggestions.append(
                "Reduce the backlog of open issues and pull requests (more than 10 open)"
            )

    return suggestions


class ScoringEngine:
    """Scores components with the scoring and activity flags applied."""

    def __init__(self, features: FeatureFlags | None = None):
        self._features = features

    def _enabled(self, flag: FeatureFlag) -> bool:
        if self._features is None:
            return True
        return self._features.is_feature_enabled(flag)

    @property
    def activity_enabled(self) -> bool:
        return self._enabled(FeatureFlag.GIT_ACTIVITY_ENABLED)

    def score(
        self,
        component: Component,
        activity: ActivityMetrics | None = None,
        now: datetime | None = None,
    ) -> ComponentScore:
        return calculate_component_score(
            component,
            activity,
            scoring_enabled=self._enabled(FeatureFlag.SCORING_ENABLED),
            activity_enabled=self.activity_enabled,
            now=now,
        )

    def suggestions(self, score: ComponentScore) -> list[str]:
        return get_improvement_suggestions(score)
