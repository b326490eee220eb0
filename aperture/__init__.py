"""aperture - software catalog aggregation and scoring."""

__version__ = "0.1.0"
