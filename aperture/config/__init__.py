"""Configuration module for aperture."""

from .loader import ConfigLoader, load_config
from .models import ApertureConfig, ApertureSettings, GitHubConfig, GitLabConfig

__all__ = [
    "ApertureConfig",
    "ApertureSettings",
    "ConfigLoader",
    "GitHubConfig",
    "GitLabConfig",
    "load_config",
]
