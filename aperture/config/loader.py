"""Configuration file loader and writer."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

import yaml

from .models import ApertureConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Load and save aperture configuration."""

    CONFIG_FILENAME = "aperture.yaml"
    USER_CONFIG_DIR = Path.home() / ".aperture"

    def __init__(
        self,
        project_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        """Initialize config loader.

        Args:
            project_path: Project directory path. If None, uses current directory.
            environ: Environment used for credential overrides. Defaults to
                ``os.environ``.
        """
        self._project_path = project_path or Path.cwd()
        self._environ = os.environ if environ is None else environ

    def get_config_path(self) -> Path | None:
        """Find config file (project-level first, then user-level)."""
        project_config = self._project_path / self.CONFIG_FILENAME
        if project_config.exists():
            return project_config

        user_config = self.USER_CONFIG_DIR / self.CONFIG_FILENAME
        if user_config.exists():
            return user_config

        return None

    def load(self) -> ApertureConfig:
        """Load configuration, returning defaults if no config exists.

        Environment overrides are applied in both cases.
        """
        config_path = self.get_config_path()
        if config_path is None:
            logger.debug("No config file found, using defaults")
            return self.apply_environment(ApertureConfig())

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            logger.info(f"Loaded config from: {config_path}")
            config = ApertureConfig.model_validate(data)
        except Exception as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            config = ApertureConfig()

        return self.apply_environment(config)

    def apply_environment(self, config: ApertureConfig) -> ApertureConfig:
        """Apply GITHUB_*/GITLAB_* environment overrides."""
        env = self._environ
        if "GITHUB_ENABLED" in env:
            config.github.enabled = env["GITHUB_ENABLED"] == "true"
        if env.get("GITHUB_TOKEN"):
            config.github.token = env["GITHUB_TOKEN"]
        if "GITLAB_ENABLED" in env:
            config.gitlab.enabled = env["GITLAB_ENABLED"] == "true"
        if env.get("GITLAB_TOKEN"):
            config.gitlab.token = env["GITLAB_TOKEN"]
        return config

    def save(self, config: ApertureConfig, user_level: bool = False) -> Path:
        """Save configuration to file.

        Tokens are never written; they belong in the environment.

        Returns:
            Path where config was saved.
        """
        if user_level:
            self.USER_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            config_path = self.USER_CONFIG_DIR / self.CONFIG_FILENAME
        else:
            config_path = self._project_path / self.CONFIG_FILENAME

        data = config.model_dump(
            exclude_none=True,
            exclude={"github": {"token"}, "gitlab": {"token"}},
        )

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                data,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

        logger.info(f"Saved config to: {config_path}")
        return config_path


def load_config(project_path: Path | str | None = None) -> ApertureConfig:
    """Load configuration from project or user directory.

    Convenience function that creates a ConfigLoader and loads config.
    """
    path = Path(project_path) if project_path else None
    return ConfigLoader(path).load()
