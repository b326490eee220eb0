"""Pydantic models for catalog entities."""

from .activity import ActivityMetrics, CachedActivityMetrics
from .base import BaseEntity, EntityKind, EntityLink, EntityMetadata
from .component import Component, ComponentSpec
from .group import Group, GroupProfile, GroupSpec
from .imported import ImportedEntity, ImportSource, SourceType, import_key
from .score import (
    ActivityDetails,
    ComponentScore,
    ScoreBreakdown,
    ScoreDetails,
    ScoreTier,
)

__all__ = [
    "ActivityDetails",
    "ActivityMetrics",
    "BaseEntity",
    "CachedActivityMetrics",
    "Component",
    "ComponentScore",
    "ComponentSpec",
    "EntityKind",
    "EntityLink",
    "EntityMetadata",
    "Group",
    "GroupProfile",
    "GroupSpec",
    "ImportSource",
    "ImportedEntity",
    "ScoreBreakdown",
    "ScoreDetails",
    "ScoreTier",
    "SourceType",
    "import_key",
]
