"""Import pipeline populating the imported-components overlay."""

from .pipeline import (
    ConfigurationError,
    ImportFailure,
    ImportPipeline,
    ImportResult,
    ImportRun,
    expand_targets,
)

__all__ = [
    "ConfigurationError",
    "ImportFailure",
    "ImportPipeline",
    "ImportResult",
    "ImportRun",
    "expand_targets",
]
