"""Repository activity metrics."""

from .service import (
    STALE_THRESHOLD_DAYS,
    ActivityMetricsService,
    build_activity_providers,
    days_since_last_commit,
    is_stale,
)

__all__ = [
    "ActivityMetricsService",
    "STALE_THRESHOLD_DAYS",
    "build_activity_providers",
    "days_since_last_commit",
    "is_stale",
]
