"""Remote source-control provider adapters."""

from .base import (
    CATALOG_FILENAME,
    ActivityProvider,
    ProviderError,
    RateLimit,
    parse_last_page,
)
from .github import GitHubActivityProvider, GitHubClient, GitHubClientError
from .gitlab import GitLabActivityProvider, GitLabClient, GitLabClientError

__all__ = [
    "ActivityProvider",
    "CATALOG_FILENAME",
    "GitHubActivityProvider",
    "GitHubClient",
    "GitHubClientError",
    "GitLabActivityProvider",
    "GitLabClient",
    "GitLabClientError",
    "ProviderError",
    "RateLimit",
    "parse_last_page",
]
