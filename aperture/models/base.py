"""Base models for catalog entities."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class EntityKind(str, Enum):
    """Supported entity kinds."""

    COMPONENT = "Component"
    GROUP = "Group"


class EntityLink(BaseModel):
    """External link for an entity."""

    url: str
    title: str | None = None
    icon: str | None = None


class EntityMetadata(BaseModel):
    """Common metadata for all entities."""

    name: str = Field(..., title="Name", description="Unique entity name")
    namespace: str = Field(default="default", title="Namespace")
    description: str | None = Field(default=None, title="Description")
    tags: list[str] = Field(default_factory=list, title="Tags")
    links: list[EntityLink] = Field(default_factory=list, title="Links")


class BaseEntity(BaseModel):
    """Base class for catalog entities."""

    apiVersion: str = "backstage.io/v1alpha1"
    kind: EntityKind
    metadata: EntityMetadata

    @property
    def name(self) -> str:
        return self.metadata.name
