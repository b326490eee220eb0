"""Direct and one-hop indirect dependency relations of a component."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from ..catalog import CatalogAggregator
from ..models import Component
from .index import DependencyIndex


@dataclass
class DependencyGraph:
    """Relations around one component, in discovery order."""

    dependencies: list[Component] = field(default_factory=list)
    dependents: list[Component] = field(default_factory=list)
    indirect_dependencies: list[Component] = field(default_factory=list)
    indirect_dependents: list[Component] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.dependencies
            or self.dependents
            or self.indirect_dependencies
            or self.indirect_dependents
        )


class DependencyGraphResolver:
    """Resolves dependency relations against the visible catalog.

    Names that do not resolve to a visible component are dropped without
    error. Expansion stops after one indirection; the center and the direct
    sets are excluded from the indirect sets, so cycles cannot grow.
    """

    MAX_DEPTH = 1

    def __init__(self, catalog: CatalogAggregator, index: DependencyIndex | None = None):
        self._catalog = catalog
        self._index = index or DependencyIndex()

    def dependency_graph(self, name: str, depth: int = 1) -> DependencyGraph:
        """Relations of ``name``; an empty graph if it is not in the catalog."""
        components = self._catalog.list_all()
        by_name = {c.name: c for c in components}
        center = by_name.get(name)
        if center is None:
            return DependencyGraph()

        self._index.load(components)
        graph = DependencyGraph(
            dependencies=self._resolve(center.spec.dependsOn, by_name),
            dependents=self._resolve(self._index.get_dependents(name), by_name),
        )

        if min(depth, self.MAX_DEPTH) > 0:
            graph.indirect_dependencies = self._expand(
                name, graph.dependencies, self._index.get_dependencies, by_name
            )
            graph.indirect_dependents = self._expand(
                name, graph.dependents, self._index.get_dependents, by_name
            )

        return graph

    def dependencies(self, name: str) -> list[Component]:
        return self.dependency_graph(name, depth=0).dependencies

    def dependents(self, name: str) -> list[Component]:
        return self.dependency_graph(name, depth=0).dependents

    def _resolve(self, names: list[str], by_name: dict[str, Component]) -> list[Component]:
        resolved: dict[str, Component] = {}
        for dep_name in names:
            component = by_name.get(dep_name)
            if component is not None and dep_name not in resolved:
                resolved[dep_name] = component
        return list(resolved.values())

    def _expand(
        self,
        center: str,
        direct: list[Component],
        neighbours: Callable[[str], list[str]],
        by_name: dict[str, Component],
    ) -> list[Component]:
        excluded = {center} | {c.name for c in direct}
        collected: dict[str, Component] = {}
        for component in direct:
            for neighbour in neighbours(component.name):
                if neighbour in excluded or neighbour in collected:
                    continue
                resolved = by_name.get(neighbour)
                if resolved is not None:
                    collected[neighbour] = resolved
        return list(collected.values())
