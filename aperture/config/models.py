"""Configuration models for aperture."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GitHubConfig(BaseModel):
    """GitHub import source."""

    enabled: bool = Field(default=False)
    token: str | None = Field(default=None, description="Personal access token")
    repositories: list[str] = Field(
        default_factory=list,
        description='Targets: "owner/repo" or "owner/*" for every repository',
    )
    base_url: str = Field(default="https://api.github.com")
    web_url: str = Field(default="https://github.com")


class GitLabConfig(BaseModel):
    """GitLab import source."""

    enabled: bool = Field(default=False)
    token: str | None = Field(default=None, description="Personal access token")
    projects: list[str] = Field(
        default_factory=list,
        description='Targets: "group/project" or "group/*" for every project',
    )
    base_url: str = Field(default="https://gitlab.com/api/v4")
    web_url: str = Field(default="https://gitlab.com")


class ApertureSettings(BaseModel):
    """Global settings."""

    cache_ttl_minutes: int = Field(
        default=60, description="Activity metrics cache TTL in minutes"
    )
    recent_limit: int = Field(default=6, description="Default size of recent lists")


class ApertureConfig(BaseModel):
    """Root configuration model."""

    version: int = Field(default=1)
    catalog_dir: str = Field(
        default="catalog-data", description="Directory with local entity YAML files"
    )
    data_dir: str = Field(
        default=".aperture", description="Directory holding overlay snapshot files"
    )
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    gitlab: GitLabConfig = Field(default_factory=GitLabConfig)
    settings: ApertureSettings = Field(default_factory=ApertureSettings)
