"""Dependency graph resolution."""

from .index import DependencyIndex, create_schema, get_connection
from .resolver import DependencyGraph, DependencyGraphResolver

__all__ = [
    "DependencyGraph",
    "DependencyGraphResolver",
    "DependencyIndex",
    "create_schema",
    "get_connection",
]
