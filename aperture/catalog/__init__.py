"""Local entity store and the merged catalog view."""

from .aggregator import LOCAL_SOURCE, UNCATEGORIZED, CatalogAggregator
from .reader import EntityReader
from .scanner import CatalogScanner
from .store import EntityStore, normalize_group_ref

__all__ = [
    "CatalogAggregator",
    "CatalogScanner",
    "EntityReader",
    "EntityStore",
    "LOCAL_SOURCE",
    "UNCATEGORIZED",
    "normalize_group_ref",
]
