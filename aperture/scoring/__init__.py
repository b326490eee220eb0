"""Component scoring and tiers."""

from .engine import (
    ScoringEngine,
    calculate_component_score,
    get_improvement_suggestions,
    get_score_tier,
    get_score_tier_label,
)

__all__ = [
    "ScoringEngine",
    "calculate_component_score",
    "get_improvement_suggestions",
    "get_score_tier",
    "get_score_tier_label",
]
