"""Provenance models for components imported from remote providers."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .component import Component


class SourceType(str, Enum):
    """Remote provider kinds."""

    GITHUB = "github"
    GITLAB = "gitlab"


class ImportSource(BaseModel):
    """Where an imported component was fetched from."""

    type: SourceType
    repository: str = Field(..., description="owner/repo or group/project path")
    url: str = Field(..., description="Web URL of the catalog descriptor file")


class ImportedEntity(BaseModel):
    """A component plus the provenance of its import."""

    component: Component
    source: ImportSource
    lastSynced: datetime

    @property
    def key(self) -> str:
        return import_key(self.source.type, self.source.repository, self.component.name)


def import_key(source_type: SourceType | str, repository: str, name: str) -> str:
    """Build the composite storage key ``<type>:<repository>:<name>``."""
    type_value = source_type.value if isinstance(source_type, SourceType) else source_type
    return f"{type_value}:{repository}:{name}"
